"""Article search: tag/author filter variants and the query builder"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, selectinload

from inkwell.models.article import Article
from inkwell.models.tag import Tag, normalize_tag_name
from inkwell.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagById:
    tag_id: int


@dataclass(frozen=True)
class TagByName:
    name: str


@dataclass(frozen=True)
class AllTags:
    """Article must carry every listed tag."""

    tags: tuple[TagRef, ...]


@dataclass(frozen=True)
class ByAuthor:
    user_id: int


@dataclass(frozen=True)
class ByHandle:
    """Partial match on the author's handle."""

    handle: str


TagRef = Union[TagById, TagByName]
TagFilter = Optional[Union[TagById, TagByName, AllTags]]
AuthorFilter = Optional[Union[ByAuthor, ByHandle]]


def _tag_ref_from(value: Any) -> TagRef | None:
    if isinstance(value, Tag):
        return TagById(value.id)
    if isinstance(value, int) and not isinstance(value, bool):
        return TagById(value)
    if isinstance(value, str):
        return TagByName(value) if value.strip() else None
    raise TypeError(f"Unsupported tag reference: {type(value).__name__}")


def tag_filter_from(value: Any) -> TagFilter:
    """
    Resolve a loose tag argument into a filter variant

    Accepts None, a Tag, a tag id, a tag name, or any collection of those
    (including an unevaluated Query). Blank names and empty collections mean
    no filter.

    Raises:
        TypeError: value is none of the accepted shapes
    """
    if value is None:
        return None
    if isinstance(value, (Tag, int, str)) and not isinstance(value, bool):
        return _tag_ref_from(value)
    if isinstance(value, (Query, Iterable)) and not isinstance(value, (bytes, dict)):
        refs = tuple(ref for ref in (_tag_ref_from(item) for item in value) if ref is not None)
        return AllTags(refs) if refs else None
    raise TypeError(f"Unsupported tag filter: {type(value).__name__}")


def author_filter_from(value: Any) -> AuthorFilter:
    """
    Resolve a loose author argument into a filter variant

    Raises:
        TypeError: value is not None, a User or a string
    """
    if value is None:
        return None
    if isinstance(value, User):
        return ByAuthor(value.id)
    if isinstance(value, str):
        return ByHandle(value) if value else None
    raise TypeError(f"Unsupported author filter: {type(value).__name__}")


def _tag_condition(ref: TagRef):
    if isinstance(ref, TagById):
        return Article.tags.any(Tag.id == ref.tag_id)
    if isinstance(ref, TagByName):
        return Article.tags.any(Tag.name == normalize_tag_name(ref.name))
    raise TypeError(f"Unsupported tag reference: {type(ref).__name__}")


def filter_by_tags(query: Query, tags: TagFilter) -> Query:
    if tags is None:
        return query
    if isinstance(tags, AllTags):
        # One EXISTS per tag narrows the set and never multiplies rows
        for ref in tags.tags:
            query = query.filter(_tag_condition(ref))
        return query
    return query.filter(_tag_condition(tags))


def filter_by_author(query: Query, author: AuthorFilter) -> Query:
    if author is None:
        return query
    if isinstance(author, ByHandle) and not author.handle:
        return query
    if isinstance(author, ByAuthor):
        return query.filter(Article.author_id == author.user_id)
    if isinstance(author, ByHandle):
        return query.filter(User.handle.contains(author.handle, autoescape=True))
    raise TypeError(f"Unsupported author filter: {type(author).__name__}")


def omnisearch(query: Query, text: str) -> Query:
    """Case-insensitive substring match on title, summary or body."""
    return query.filter(
        or_(
            Article.title.icontains(text, autoescape=True),
            Article.summary.icontains(text, autoescape=True),
            Article.body.icontains(text, autoescape=True),
        )
    )


def build_search_query(
    db: Session,
    query: str | None = None,
    *,
    tags: TagFilter = None,
    author: AuthorFilter = None,
) -> Query:
    """Compose the article query; articles without author or tags stay included."""
    chain = (
        db.query(Article)
        .outerjoin(Article.author)
        .options(selectinload(Article.tags), selectinload(Article.author))
    )
    chain = filter_by_author(chain, author)
    chain = filter_by_tags(chain, tags)
    if query is not None and query.strip():
        chain = omnisearch(chain, query.strip())
    return chain.order_by(Article.created_at.desc(), Article.id.desc())


def search_articles(
    db: Session,
    query: str | None = None,
    *,
    tags: TagFilter = None,
    author: AuthorFilter = None,
) -> list[Article]:
    """
    Search articles

    Args:
        db: Database session
        query: Free text matched against title, summary and body
        tags: Tag filter variant (see `tag_filter_from`)
        author: Author filter variant (see `author_filter_from`)

    Returns:
        Distinct matching articles, newest first
    """
    articles = build_search_query(db, query, tags=tags, author=author).all()
    logger.debug(f"Article search q={query!r} tags={tags} author={author}: {len(articles)} results")
    return articles
