"""
Authentication Module
Password hashing, JWT tokens and role checks
"""

from app.auth.password import hash_password, verify_password, generate_random_password
from app.auth.dependencies import (
    create_access_token,
    decode_access_token,
    get_current_user,
    require_admin,
    require_staff
)

__all__ = [
    "hash_password",
    "verify_password",
    "generate_random_password",
    "create_access_token",
    "decode_access_token",
    "get_current_user",
    "require_admin",
    "require_staff",
]
