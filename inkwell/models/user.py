"""User model for authors and account management"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship, validates

from inkwell.config.database import Base, Identifier

HANDLE_MAX = 50


class User(Base):
    """Registered user mapped to `users` table."""

    __tablename__ = "users"

    id = Column(Identifier, primary_key=True, autoincrement=True)
    handle = Column(String(HANDLE_MAX), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    profile_picture = Column(String(255), nullable=True)
    admin = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Deleting a user nulls `author_id` on their articles instead of removing them
    articles = relationship("Article", back_populates="author", order_by="Article.id")

    @validates("handle")
    def _strip_handle(self, key, value):
        return value.strip() if isinstance(value, str) else value

    @property
    def owner(self) -> "User":
        return self

    def __repr__(self):
        return f"<User {self.handle}>"
