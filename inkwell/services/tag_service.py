"""Tag lookup and creation"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inkwell.config.database import in_identifier_range, is_identifier
from inkwell.errors import RecordInvalid, RecordNotFound
from inkwell.models.tag import NAME_MAX, Tag, normalize_tag_name

logger = logging.getLogger(__name__)


class TagService:
    """Resolves tag references from request payloads"""

    def __init__(self, db: Session):
        self.db = db

    def list_tags(self) -> list[Tag]:
        return self.db.query(Tag).order_by(Tag.name).all()

    def get(self, tag_id: int) -> Tag:
        tag = self.db.get(Tag, tag_id) if in_identifier_range(tag_id) else None
        if tag is None:
            raise RecordNotFound("Tag", tag_id)
        return tag

    def find_by_name(self, name: str) -> Tag | None:
        return self.db.query(Tag).filter(Tag.name == normalize_tag_name(name)).first()

    def create(self, name: str) -> Tag:
        """Create a tag, or return the existing one with the same normalized name"""
        existing = self.find_by_name(name)
        if existing is not None:
            return existing

        tag = Tag(name=self._checked_name(name))
        self.db.add(tag)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise RecordInvalid({"name": ["has already been taken"]}) from exc
        logger.info(f"Created tag {tag.name}")
        return tag

    def resolve(self, refs: Iterable[Any]) -> list[Tag]:
        """
        Map tag ids and names to Tag rows

        Unknown names become new pending tags (committed with the article).
        Duplicates are kept so the article validation can reject them.

        Raises:
            RecordNotFound: an id does not exist
            RecordInvalid: a name is blank or too long
        """
        tags: list[Tag] = []
        pending: dict[str, Tag] = {}
        for ref in refs:
            if isinstance(ref, Tag):
                tags.append(ref)
            elif isinstance(ref, int) and not isinstance(ref, bool):
                tags.append(self.get(ref))
            elif isinstance(ref, str) and is_identifier(ref.strip()):
                tags.append(self.get(int(ref.strip())))
            elif isinstance(ref, str):
                name = self._checked_name(ref)
                tag = pending.get(name) or self.find_by_name(name)
                if tag is None:
                    tag = Tag(name=name)
                    self.db.add(tag)
                pending[name] = tag
                tags.append(tag)
            else:
                raise TypeError(f"Unsupported tag reference: {type(ref).__name__}")
        return tags

    @staticmethod
    def _checked_name(name: str) -> str:
        normalized = normalize_tag_name(name)
        if not normalized:
            raise RecordInvalid({"tags": ["can't contain a blank name"]})
        if len(normalized) > NAME_MAX:
            raise RecordInvalid({"tags": [f"name is too long (maximum is {NAME_MAX} characters)"]})
        return normalized
