"""
Response database models.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Integer, JSON, ForeignKey, Table, Index
from sqlalchemy.orm import relationship
from poprev.database import Base


# Weak links from responses to categories. The foreign key on category_id
# keeps a referenced category from disappearing underneath a response.
response_categories = Table(
    "response_categories",
    Base.metadata,
    Column("response_id", String(36), ForeignKey("responses.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", String(36), ForeignKey("categories.id"), primary_key=True),
    Index("idx_response_categories_category", "category_id"),
)


class Response(Base):
    """Published question/answer record."""

    __tablename__ = "responses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)  # HTML
    excerpt = Column(Text, nullable=False)
    references = Column(JSON, nullable=False, default=list)  # [{paper, section, paragraph, quote}]
    author = Column(String(100), nullable=False, default="Anonymous")
    pdf_url = Column(String(500), nullable=True)
    seq = Column(Integer, nullable=False, index=True)  # insertion order, breaks sort ties
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    categories = relationship("Category", secondary=response_categories, order_by="Category.name")
    tag_links = relationship(
        "ResponseTag",
        back_populates="response",
        order_by="ResponseTag.position",
        cascade="all, delete-orphan",
    )

    @property
    def tags(self) -> list[str]:
        return [link.name for link in self.tag_links]


class ResponseTag(Base):
    """Free-form tag attached to a response, kept in the order given."""

    __tablename__ = "response_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    response_id = Column(String(36), ForeignKey("responses.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    response = relationship("Response", back_populates="tag_links")

    __table_args__ = (
        Index("idx_response_tag_name", "name"),
        Index("idx_response_tag_response", "response_id"),
    )
