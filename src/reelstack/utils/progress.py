"""Progress tracking types shared across CLI and services."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProcessingStage(str, Enum):
    """Lifecycle stages for saving a video link."""

    VALIDATING = "validating"
    RESOLVING = "resolving"
    TAGGING = "tagging"
    STORING = "storing"
    COMPLETE = "complete"
    FAILED = "failed"


class ProgressUpdate(BaseModel):
    """Structured progress payload for UI rendering and logging."""

    stage: ProcessingStage
    stage_progress: int = Field(ge=0, le=100)
    overall_progress: int = Field(ge=0, le=100)
    message: str
    video_url: str

    model_config = ConfigDict(extra="forbid")


__all__ = ["ProcessingStage", "ProgressUpdate"]
