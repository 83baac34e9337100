"""Tag model"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship, validates

from inkwell.config.database import Base, Identifier

NAME_MAX = 50


def normalize_tag_name(name: str) -> str:
    """Tag names are stored stripped and lower-cased so lookups are case-insensitive."""
    return name.strip().lower()


class Tag(Base):
    """Named label mapped to `tags` table."""

    __tablename__ = "tags"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    name = Column(String(NAME_MAX), unique=True, nullable=False, index=True)

    articles = relationship(
        "Article",
        secondary="articles_tags",
        back_populates="tags",
        order_by="Article.id",
    )

    @validates("name")
    def _normalize_name(self, key, value):
        return normalize_tag_name(value) if isinstance(value, str) else value

    def __repr__(self):
        return f"<Tag {self.name}>"
