"""Tag endpoints"""

from typing import List

from fastapi import APIRouter, Depends, status

from inkwell.api.deps import get_current_user, get_tag_service
from inkwell.api.schemas import TagCreate, TagOut
from inkwell.models.user import User
from inkwell.services.tag_service import TagService

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=List[TagOut])
def list_tags(tags: TagService = Depends(get_tag_service)):
    return tags.list_tags()


@router.post("", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(
    payload: TagCreate,
    _current_user: User = Depends(get_current_user),
    tags: TagService = Depends(get_tag_service),
):
    return tags.create(payload.name)
