"""Vector store handle model."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from docflow_agents.core.models.base import BaseSchema


class StoreHandle(BaseSchema):
    """A vector store created for exactly one workflow execution."""

    store_id: str = Field(..., description="Remote id of the vector store.")
    isolation_key: str = Field(..., description="Metadata key unique to the owning workflow execution.")
    purpose: str = Field(default="", description="Purpose tag stored in the store metadata.")
    protection_key: Optional[str] = Field(default=None, description="Metadata key protecting the store from bulk cleanup.")
