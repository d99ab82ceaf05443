"""Shared base model definitions for ReelStack domain objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ReelStackBaseModel(BaseModel):
    """Base model configured for ReelStack-wide defaults."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class ProviderResponse(BaseModel):
    """Base for partial third-party payloads: unknown keys are dropped, every field is optional."""

    model_config = ConfigDict(extra="ignore")


__all__ = ["ProviderResponse", "ReelStackBaseModel"]
