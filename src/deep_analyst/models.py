"""
Data model shared by the backend, the storage layer and the UI.
"""

import time
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field


class GroundingSource(BaseModel):
    uri: str
    title: str


class ResearchReport(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    query: str
    content: str
    sources: List[GroundingSource] = []
    # Milliseconds since the Unix epoch.
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))


class AppState(BaseModel):
    reports: List[ResearchReport] = []  # most recent first
    current_report: Optional[ResearchReport] = None
    loading: bool = False
    error: Optional[str] = None


class ResearchRequest(BaseModel):
    query: str


class ContentUpdate(BaseModel):
    content: str


class RenderResponse(BaseModel):
    html: str
