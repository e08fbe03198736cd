"""
Response models for the pins API.

Field names follow the JSON wire format (camelCase).

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PinOut(BaseModel):
    """A pin as returned by the API."""

    id: str
    lat: float
    lng: float
    title: str
    description: str
    authorName: str
    createdAt: str


class CommentOut(BaseModel):
    """A comment as returned by the API."""

    id: str
    pinId: str
    authorName: str
    content: str
    createdAt: str


class PinDetail(PinOut):
    """A pin with its comments, newest first."""

    comments: List[CommentOut] = Field(default_factory=list)


class ClusterOut(BaseModel):
    """A rendered cluster for a given zoom level."""

    lat: float
    lng: float
    size: int
    pinIds: List[str]
    style: Dict[str, Any]


class ClustersResponse(BaseModel):
    zoom: float
    resolution: float
    selected: Optional[str] = None
    clusters: List[ClusterOut]
