"""Shared response shapes."""
from __future__ import annotations

from pydantic import BaseModel


class ActionResult(BaseModel):
    success: bool
    message: str
