"""Shared FastAPI dependencies"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from inkwell.config.database import get_db
from inkwell.models.user import User
from inkwell.services.article_pipeline import ArticlePipeline
from inkwell.services.article_service import ArticleService
from inkwell.services.math_renderer import MathMLRenderer, MathRenderer
from inkwell.services.storage import MediaStorage
from inkwell.services.tag_service import TagService
from inkwell.services.user_service import UserService

_basic = HTTPBasic(auto_error=False)

_renderer = MathMLRenderer()


def get_renderer() -> MathRenderer:
    return _renderer


def get_storage() -> MediaStorage:
    return MediaStorage()


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_tag_service(db: Session = Depends(get_db)) -> TagService:
    return TagService(db)


def get_article_service(
    db: Session = Depends(get_db),
    renderer: MathRenderer = Depends(get_renderer),
) -> ArticleService:
    return ArticleService(db, ArticlePipeline(renderer))


def get_optional_user(
    credentials: Optional[HTTPBasicCredentials] = Depends(_basic),
    users: UserService = Depends(get_user_service),
) -> Optional[User]:
    """Acting user from HTTP Basic credentials, or None when none were sent"""
    if credentials is None:
        return None
    user = users.authenticate(users.find_by_handle(credentials.username), credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )
    return user
