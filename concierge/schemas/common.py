"""Pydantic v2 schemas shared by several routers."""

from typing import Any

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class ActionResponse(BaseModel):
    """Successful outcome of a mutating action."""

    success: bool = True
    message: str | None = None
    data: dict[str, Any] | None = None
