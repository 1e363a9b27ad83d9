"""User service module."""

from app.services.users.service import UserService


__all__ = ["UserService"]
