"""Gemini gateway request client."""
from gateway.models import GatewayResponse, InlineImage, ResponseKind
from gateway.services import (
    improve_prompt,
    get_prompt_variations,
    generate_image,
    edit_image,
    get_chat_response
)

__all__ = [
    "GatewayResponse",
    "InlineImage",
    "ResponseKind",
    "improve_prompt",
    "get_prompt_variations",
    "generate_image",
    "edit_image",
    "get_chat_response"
]
