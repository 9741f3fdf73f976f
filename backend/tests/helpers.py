"""Assertions shared by the endpoint tests."""


def assert_error(response, status_code: int, message: str = None) -> dict:
    """Check the failure envelope and return its body."""
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["success"] is False
    if message is not None:
        assert body["error"] == message
    return body


def data_of(response, status_code: int = 200):
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["success"] is True
    return body["data"]
