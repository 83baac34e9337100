"""Normalization, validation and derivation run on every article save"""

from __future__ import annotations

import logging

from inkwell.errors import FieldErrors
from inkwell.models.article import (
    BODY_MIN,
    MAX_TAGS,
    RENDERED_FIELDS,
    SUMMARY_MAX,
    TITLE_MAX,
    TITLE_MIN,
    Article,
)
from inkwell.services.math_renderer import MathRenderer, MathSyntaxError, render_text

logger = logging.getLogger(__name__)

BLANK = "can't be blank"


def _too_short(minimum: int) -> str:
    return f"is too short (minimum is {minimum} characters)"


def _too_long(maximum: int) -> str:
    return f"is too long (maximum is {maximum} characters)"


class ArticlePipeline:
    """
    Prepares an article for persistence

    Steps, in order: strip text fields, check field rules and tag rules,
    then derive `*_rendered` columns from $$...$$ spans. Errors from every
    step are collected; a render failure only affects its own field.
    """

    def __init__(self, renderer: MathRenderer):
        self.renderer = renderer

    def run(self, article: Article) -> FieldErrors:
        self.normalize(article)
        errors = self.validate(article)
        errors.merge(self.derive(article))
        return errors

    @staticmethod
    def normalize(article: Article) -> None:
        for field in RENDERED_FIELDS:
            value = getattr(article, field)
            if isinstance(value, str):
                setattr(article, field, value.strip())
        if not article.summary:
            article.summary = None

    def validate(self, article: Article) -> FieldErrors:
        errors = FieldErrors()

        if not article.title:
            errors.add("title", BLANK)
        if len(article.title or "") < TITLE_MIN:
            errors.add("title", _too_short(TITLE_MIN))
        elif len(article.title) > TITLE_MAX:
            errors.add("title", _too_long(TITLE_MAX))

        if article.summary is not None and len(article.summary) > SUMMARY_MAX:
            errors.add("summary", _too_long(SUMMARY_MAX))

        if not article.body:
            errors.add("body", BLANK)
        if len(article.body or "") < BODY_MIN:
            errors.add("body", _too_short(BODY_MIN))

        views = article.views if article.views is not None else 0
        if isinstance(views, bool) or not isinstance(views, int):
            errors.add("views", "must be an integer")
        elif views < 0:
            errors.add("views", "must be greater than or equal to 0")

        self._validate_tags(article, errors)
        return errors

    @staticmethod
    def _validate_tags(article: Article, errors: FieldErrors) -> None:
        tags = list(article.tags)
        if len(tags) > MAX_TAGS:
            errors.add("tags", f"has too many tags (maximum is {MAX_TAGS})")

        seen = set()
        for tag in tags:
            key = ("id", tag.id) if tag.id is not None else ("object", id(tag))
            if key in seen:
                errors.add("tags", f"contains duplicate tag '{tag.name}'")
                break
            seen.add(key)

    def derive(self, article: Article) -> FieldErrors:
        errors = FieldErrors()
        for field in RENDERED_FIELDS:
            try:
                rendered = render_text(getattr(article, field), self.renderer)
            except MathSyntaxError as exc:
                logger.warning(f"Math render failed for article {article.id} {field}: {exc}")
                errors.add(field, f"has invalid math notation ({exc})")
                rendered = None
            setattr(article, f"{field}_rendered", rendered)
        return errors
