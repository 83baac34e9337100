"""Request and response bodies"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from inkwell.models.article import Article


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TagCreate(BaseModel):
    name: str


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    handle: str
    profile_picture: Optional[str] = None


class UserOut(UserSummary):
    admin: bool = False
    created_at: datetime


class UserCreate(BaseModel):
    handle: str
    password: str


class UserUpdate(BaseModel):
    """Profile edits; anything but the handle is ignored"""

    handle: Optional[str] = None


class PasswordChange(BaseModel):
    current: str
    new: str
    confirm: str


class ArticleCreate(BaseModel):
    title: str
    body: str
    summary: Optional[str] = None
    tags: List[Union[int, str]] = Field(default_factory=list)
    anonymous: bool = False


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None
    summary: Optional[str] = None
    tags: Optional[List[Union[int, str]]] = None
    anonymous: Optional[bool] = None


class ArticleOut(BaseModel):
    id: int
    title: str
    summary: Optional[str] = None
    body: str
    title_html: str
    summary_html: Optional[str] = None
    body_html: str
    image: Optional[str] = None
    views: int
    author: Optional[UserSummary] = None
    tags: List[TagOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_article(cls, article: Article) -> "ArticleOut":
        summary_html = article.display_summary
        return cls(
            id=article.id,
            title=article.title,
            summary=article.summary,
            body=article.body,
            title_html=str(article.display_title),
            summary_html=str(summary_html) if summary_html is not None else None,
            body_html=str(article.display_body),
            image=article.image,
            views=article.views,
            author=UserSummary.model_validate(article.author) if article.author else None,
            tags=[TagOut.model_validate(tag) for tag in article.tags],
            created_at=article.created_at,
            updated_at=article.updated_at,
        )


class UserDetail(UserOut):
    articles: List[ArticleOut] = Field(default_factory=list)
