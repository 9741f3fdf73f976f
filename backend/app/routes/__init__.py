# Routes package init
"""
SocialConnect Backend — API Routes Package
============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:           /api/auth/*            (register, login, logout)
    - posts.py:          /api/posts/*           (posts, feed, likes, comments)
    - users.py:          /api/users/*           (profiles, follow graph)
    - notifications.py:  /api/notifications/*   (inbox, mark read, WebSocket feed)
    - health.py:         GET /health, GET /api/test

Routes stay thin: parse the request, call a service, wrap the result in the
`{success, data, message}` envelope. Business rules live in services.
"""
