"""
User database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum
import enum
from poprev.database import Base


class Role(str, enum.Enum):
    """User role enumeration."""
    admin = "admin"
    editor = "editor"
    viewer = "viewer"


class User(Base):
    """Account allowed to sign in to the API."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)  # Always lowercase
    password_hash = Column(String(100), nullable=False)  # bcrypt
    role = Column(Enum(Role), nullable=False, default=Role.viewer)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
