# Services package init
"""
SocialConnect Backend — Services Layer
========================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an AsyncSession plus domain values, apply the rules and
       return Pydantic response models or raise app.exceptions errors.

Service Inventory:
    - TokenService:         sign/verify bearer JWTs
    - AuthService:          registration, login, password hashing
    - PostService:          posts, feed, likes, comments
    - UserService:          profiles and the follow graph
    - NotificationService:  inbox queries and notification creation
    - NotificationHub:      in-process realtime fan-out (realtime.py)
"""
