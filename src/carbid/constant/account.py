from enum import Enum


class Role(Enum):
    """Roles an authenticated account can hold."""

    USER = "user"
    ADMIN = "admin"
