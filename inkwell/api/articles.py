"""Article endpoints"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from inkwell.api.deps import get_article_service, get_current_user, get_storage, get_tag_service, get_user_service
from inkwell.api.schemas import ArticleCreate, ArticleOut, ArticleUpdate
from inkwell.config.database import is_identifier
from inkwell.models.user import User
from inkwell.services.article_search import (
    AuthorFilter,
    ByAuthor,
    TagFilter,
    author_filter_from,
    search_articles,
    tag_filter_from,
)
from inkwell.services.article_service import ArticleService
from inkwell.services.permissions import authorize
from inkwell.services.storage import MediaStorage
from inkwell.services.tag_service import TagService
from inkwell.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/articles", tags=["articles"])


def _parse_tags(raw: Optional[str], tags: TagService) -> TagFilter:
    """Comma-separated ids (must exist) and/or names"""
    if not raw or not raw.strip():
        return None
    refs = []
    for token in (part.strip() for part in raw.split(",")):
        if not token:
            continue
        refs.append(tags.get(int(token)) if is_identifier(token) else token)
    return tag_filter_from(refs)


def _parse_author(raw: Optional[str], users: UserService) -> AuthorFilter:
    """Numeric value is a user id (must exist); anything else matches handles"""
    if not raw or not raw.strip():
        return None
    raw = raw.strip()
    if is_identifier(raw):
        return ByAuthor(users.get(int(raw)).id)
    return author_filter_from(raw)


@router.get("", response_model=List[ArticleOut])
def list_articles(
    q: Optional[str] = Query(None),
    tags: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    articles: ArticleService = Depends(get_article_service),
    tag_service: TagService = Depends(get_tag_service),
    users: UserService = Depends(get_user_service),
):
    """Search articles by free text, tags and author"""
    results = search_articles(
        articles.db,
        q,
        tags=_parse_tags(tags, tag_service),
        author=_parse_author(author, users),
    )
    return [ArticleOut.from_article(article) for article in results]


@router.get("/{article_id}", response_model=ArticleOut)
def show_article(article_id: int, articles: ArticleService = Depends(get_article_service)):
    article = articles.record_view(articles.get(article_id))
    return ArticleOut.from_article(article)


@router.post("", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
def create_article(
    payload: ArticleCreate,
    current_user: User = Depends(get_current_user),
    articles: ArticleService = Depends(get_article_service),
):
    article = articles.create(
        title=payload.title,
        body=payload.body,
        summary=payload.summary,
        tags=payload.tags,
        author=current_user,
        anonymous=payload.anonymous,
    )
    logger.info(f"Article {article.id} created by user {current_user.id} (anonymous={payload.anonymous})")
    return ArticleOut.from_article(article)


@router.patch("/{article_id}", response_model=ArticleOut)
def update_article(
    article_id: int,
    payload: ArticleUpdate,
    current_user: User = Depends(get_current_user),
    articles: ArticleService = Depends(get_article_service),
):
    article = articles.get(article_id)
    authorize(current_user, article)
    article = articles.update(article, payload.model_dump(exclude_unset=True), acting_user=current_user)
    return ArticleOut.from_article(article)


@router.put("/{article_id}/image", response_model=ArticleOut)
def upload_article_image(
    article_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    articles: ArticleService = Depends(get_article_service),
    storage: MediaStorage = Depends(get_storage),
):
    article = articles.get(article_id)
    authorize(current_user, article)
    previous = article.image
    identifier = storage.save(file.file, file.content_type, field="image")
    try:
        article = articles.attach_image(article, identifier)
    except Exception:
        storage.delete(identifier)
        raise
    storage.delete(previous)
    return ArticleOut.from_article(article)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(
    article_id: int,
    current_user: User = Depends(get_current_user),
    articles: ArticleService = Depends(get_article_service),
    storage: MediaStorage = Depends(get_storage),
):
    article = articles.get(article_id)
    authorize(current_user, article)
    image = article.image
    articles.destroy(article)
    storage.delete(image)
