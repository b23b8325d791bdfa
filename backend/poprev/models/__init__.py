"""
Database models package.
"""

from poprev.models.category import Category
from poprev.models.response import Response, ResponseTag, response_categories
from poprev.models.user import User, Role

__all__ = [
    "Category",
    "Response",
    "ResponseTag",
    "response_categories",
    "User",
    "Role",
]
