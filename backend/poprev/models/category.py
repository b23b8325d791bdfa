"""
Category database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import backref, relationship
from poprev.database import Base


class Category(Base):
    """Topic tag with optional parent category."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)  # Always lowercase
    parent_id = Column(String(36), ForeignKey("categories.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    # passive_deletes stops the ORM from nulling children's parent_id on delete
    parent = relationship("Category", remote_side=[id], backref=backref("children", passive_deletes="all"))
