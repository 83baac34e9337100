"""Database models"""

from inkwell.models.article import Article
from inkwell.models.article_tag import ArticleTag
from inkwell.models.tag import Tag
from inkwell.models.user import User

__all__ = [
    "Article",
    "ArticleTag",
    "Tag",
    "User",
]
