"""
Pydantic schemas for the Blog API.

Request bodies are checked for required keys first (apps.blog.validators),
then converted into these typed structures.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Body of POST /posts."""
    model_config = ConfigDict(extra="ignore")

    title: str
    content: Optional[str] = None
    author_id: str


class PostUpdate(BaseModel):
    """Fields PUT /posts/{id} may change. Anything else is dropped."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    content: Optional[str] = None


class AuthorCreate(BaseModel):
    """Body of POST /authors."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    user_name: str = Field(alias="userName", min_length=1, max_length=100)


class CommentResponse(BaseModel):
    content: Optional[str] = None


class PostResponse(BaseModel):
    id: str
    author: str
    content: Optional[str] = None
    title: str
    comments: list[CommentResponse] = Field(default_factory=list)


class PostUpdateResponse(BaseModel):
    id: str
    title: str
    content: Optional[str] = None


class AuthorResponse(BaseModel):
    id: str
    name: str
    userName: str
