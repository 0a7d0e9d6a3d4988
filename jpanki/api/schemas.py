"""Request/response models for the HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProcessRequest(BaseModel):
    """Body of POST /api/process."""

    input: Optional[str] = None
    credentials: Optional[Dict[str, Any]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class CardsPage(BaseModel):
    cards: List[Dict[str, Any]] = Field(default_factory=list)
    pagination: Pagination


class Stats(BaseModel):
    total: int
    withCasual: int
    withoutCasual: int
