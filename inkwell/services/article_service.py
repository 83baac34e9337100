"""Article persistence: create, update, destroy and view counting"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.config.database import in_identifier_range
from inkwell.errors import RecordInvalid, RecordNotFound
from inkwell.models.article import Article
from inkwell.models.user import User
from inkwell.services.article_pipeline import ArticlePipeline
from inkwell.services.tag_service import TagService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "summary", "body")


class ArticleService:
    """Runs the save pipeline and commits articles all-or-nothing"""

    def __init__(self, db: Session, pipeline: ArticlePipeline):
        self.db = db
        self.pipeline = pipeline
        self.tags = TagService(db)

    def get(self, article_id: int) -> Article:
        article = self.db.get(Article, article_id) if in_identifier_range(article_id) else None
        if article is None:
            raise RecordNotFound("Article", article_id)
        return article

    def save(self, article: Article) -> Article:
        """
        Validate, derive and commit an article

        Raises:
            RecordInvalid: any field failed; the session is rolled back
        """
        errors = self.pipeline.run(article)
        if errors:
            logger.warning(f"Article save rejected: {dict(errors)}")
            self.db.rollback()
            raise RecordInvalid(errors)

        self.db.add(article)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(f"Article save hit integrity error: {exc.orig}")
            raise RecordInvalid({"base": ["could not be saved"]}) from exc

        logger.info(f"Saved article {article.id}")
        return article

    def create(
        self,
        *,
        title: str,
        body: str,
        summary: Optional[str] = None,
        tags: Iterable[Any] = (),
        author: Optional[User] = None,
        anonymous: bool = False,
    ) -> Article:
        """Build and save a new article; `anonymous` drops the author."""
        article = Article(
            title=title,
            body=body,
            summary=summary,
            views=0,
            author=None if anonymous else author,
            tags=self.tags.resolve(tags),
        )
        return self.save(article)

    def update(
        self,
        article: Article,
        changes: dict[str, Any],
        *,
        acting_user: Optional[User] = None,
    ) -> Article:
        """
        Apply a partial update

        `changes` may hold title/summary/body, `tags` (ids or names) and
        `anonymous`: True clears the author, False assigns the acting user.
        """
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(article, field, changes[field])
        if "tags" in changes and changes["tags"] is not None:
            article.tags = self.tags.resolve(changes["tags"])
        if changes.get("anonymous") is not None:
            article.author = None if changes["anonymous"] else acting_user
        return self.save(article)

    def attach_image(self, article: Article, identifier: str) -> Article:
        article.image = identifier
        return self.save(article)

    def destroy(self, article: Article) -> None:
        self.db.delete(article)
        self.db.commit()
        logger.info(f"Deleted article {article.id}")

    def record_view(self, article: Article) -> Article:
        """Increment the view counter in SQL; reading is not an edit, so `updated_at` is kept."""
        self.db.query(Article).filter(Article.id == article.id).update(
            {Article.views: Article.views + 1, Article.updated_at: Article.updated_at},
            synchronize_session=False,
        )
        self.db.commit()
        self.db.refresh(article)
        return article

