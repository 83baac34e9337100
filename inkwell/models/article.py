"""Article model"""

from datetime import datetime
from typing import Optional, Union

from markupsafe import Markup
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from inkwell.config.database import Base, Identifier

TITLE_MIN = 10
TITLE_MAX = 1000
SUMMARY_MAX = 1500
BODY_MIN = 128
MAX_TAGS = 5

# Raw text fields that get a parallel `<field>_rendered` column
RENDERED_FIELDS = ("title", "summary", "body")


class Article(Base):
    """Authored article mapped to `articles` table."""

    __tablename__ = "articles"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    author_id = Column(Identifier, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String(TITLE_MAX), nullable=False)
    summary = Column(Text, nullable=True)
    body = Column(Text, nullable=False)
    image = Column(String(255), nullable=True)
    views = Column(Integer, nullable=False, default=0)

    # Derived at save time; null when the raw field has no $$...$$ span
    title_rendered = Column(Text, nullable=True)
    summary_rendered = Column(Text, nullable=True)
    body_rendered = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="articles")
    tags = relationship("Tag", secondary="articles_tags", back_populates="articles", order_by="Tag.id")

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_articles_views_non_negative"),
        Index("idx_articles_created_at", "created_at"),
    )

    @property
    def owner(self):
        return self.author

    @property
    def display_title(self) -> Union[Markup, str]:
        return self._display("title")

    @property
    def display_summary(self) -> Union[Markup, str, None]:
        return self._display("summary")

    @property
    def display_body(self) -> Union[Markup, str]:
        return self._display("body")

    def _display(self, field: str) -> Optional[Union[Markup, str]]:
        """Rendered value marked safe for embedding, falling back to the raw field."""
        rendered = getattr(self, f"{field}_rendered")
        if rendered:
            return Markup(rendered)
        return getattr(self, field)

    def __repr__(self):
        return f"<Article {self.id}: {(self.title or '')[:30]}>"
