from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Idea(BaseModel):
    id: str
    title: str
    summary: str
    objective: str
    tags: list[str] = Field(default_factory=list)


class ContentIdea(BaseModel):
    id: int
    content: str
    createdAt: str


class IdeaPage(BaseModel):
    items: list[ContentIdea]
    total: int
    limit: int
    offset: int
    hasMore: bool
    nextOffset: Optional[int] = None


class RandomIdeas(BaseModel):
    ideas: list[ContentIdea]
