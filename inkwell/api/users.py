"""User endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status

from inkwell.api.deps import get_current_user, get_storage, get_user_service
from inkwell.api.schemas import ArticleOut, PasswordChange, UserCreate, UserDetail, UserOut, UserUpdate
from inkwell.models.user import User
from inkwell.services.permissions import authorize
from inkwell.services.storage import MediaStorage
from inkwell.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

DELETE = "User successfully deleted."
PASSWORD_CHANGED = "Successfully changed password."


def _detail(user: User) -> UserDetail:
    return UserDetail(
        **UserOut.model_validate(user).model_dump(),
        articles=[ArticleOut.from_article(article) for article in user.articles],
    )


@router.get("", response_model=List[UserOut])
def list_users(users: UserService = Depends(get_user_service)):
    return users.list_users()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, users: UserService = Depends(get_user_service)):
    return users.register(payload.handle, payload.password)


@router.post("/me/password")
def update_password(
    payload: PasswordChange,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    users.change_password(current_user, current=payload.current, new=payload.new, confirm=payload.confirm)
    return {"message": PASSWORD_CHANGED}


@router.get("/{user_id}", response_model=UserDetail)
def show_user(user_id: int, users: UserService = Depends(get_user_service)):
    return _detail(users.get(user_id, with_articles=True))


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    user = users.get(user_id)
    authorize(current_user, user)
    user = users.update_profile(user, handle=payload.handle)
    return user


@router.put("/{user_id}/profile-picture", response_model=UserOut)
def upload_profile_picture(
    user_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    storage: MediaStorage = Depends(get_storage),
):
    user = users.get(user_id)
    authorize(current_user, user)
    previous = user.profile_picture
    identifier = storage.save(file.file, file.content_type, field="profile_picture")
    try:
        user = users.update_profile(user, profile_picture=identifier)
    except Exception:
        storage.delete(identifier)
        raise
    storage.delete(previous)
    return user


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    user = users.get(user_id)
    authorize(current_user, user)
    users.destroy(user)
    if current_user.id != user_id:
        logger.info(f"User {user_id} deleted by admin {current_user.id}")
    return {"message": DELETE}
