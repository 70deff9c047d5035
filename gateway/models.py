"""Decoded gateway response shapes."""
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field


class ResponseKind(str, Enum):
    """The three shapes a gateway answer can take."""
    TEXT = "text"
    STRING_ARRAY = "string_array"
    IMAGE = "image"


class InlineImage(BaseModel):
    """Raw image bytes as returned by the gateway."""
    mime_type: str = Field(..., description="Image MIME type")
    data: bytes = Field(..., description="Raw image bytes")


class GatewayResponse(BaseModel):
    """
    Tagged variant over the gateway's answer shapes.

    Exactly one of ``text``, ``items`` or ``image`` is populated, selected
    by ``kind``.
    """
    kind: ResponseKind
    text: Optional[str] = None
    items: Optional[List[str]] = None
    image: Optional[InlineImage] = None
