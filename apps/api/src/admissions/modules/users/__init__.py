"""
Users Module

User accounts. This service only provisions student accounts during
enrollment; login and session handling live elsewhere.
"""

from .models import Gender, User, UserRole
from .repository import UserRepository

__all__ = ["Gender", "User", "UserRepository", "UserRole"]
