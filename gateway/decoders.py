"""
Explicit decoders from google-genai response objects to GatewayResponse.

Every decoder raises ValueError when the expected field is absent; the
service layer turns that into a GatewayError.
"""
import json
from typing import Any, List

from gateway.models import GatewayResponse, InlineImage, ResponseKind


def _first_candidate_parts(response: Any) -> List[Any]:
    """Return the parts of the first candidate, or an empty list."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def collect_text(response: Any) -> str:
    """Concatenate every text part of the first candidate."""
    texts = []
    for part in _first_candidate_parts(response):
        text = getattr(part, "text", None)
        if text:
            texts.append(text)
    return "".join(texts)


def decode_text(response: Any) -> GatewayResponse:
    text = collect_text(response).strip()
    if not text:
        raise ValueError("response contained no text")
    return GatewayResponse(kind=ResponseKind.TEXT, text=text)


def decode_string_array(response: Any) -> GatewayResponse:
    """Decode a JSON array of strings carried in the response text."""
    text = collect_text(response).strip()
    if not text:
        raise ValueError("response contained no JSON payload")

    items = json.loads(text)
    if not isinstance(items, list):
        raise ValueError(f"expected a JSON array, got {type(items).__name__}")
    if not items:
        raise ValueError("JSON array was empty")
    if not all(isinstance(item, str) and item.strip() for item in items):
        raise ValueError("JSON array must contain only non-empty strings")

    return GatewayResponse(kind=ResponseKind.STRING_ARRAY, items=[item.strip() for item in items])


def decode_content_image(response: Any) -> GatewayResponse:
    """Find the first inline image part; text parts alone do not count."""
    for part in _first_candidate_parts(response):
        inline = getattr(part, "inline_data", None)
        if inline and getattr(inline, "data", None):
            mime_type = getattr(inline, "mime_type", None) or "image/png"
            return GatewayResponse(
                kind=ResponseKind.IMAGE,
                image=InlineImage(mime_type=mime_type, data=inline.data),
            )
    raise ValueError("no image was generated in the response")


def decode_generated_image(response: Any, default_mime_type: str) -> GatewayResponse:
    """Decode the first image of an image-generation (Imagen) response."""
    generated = getattr(response, "generated_images", None)
    if not generated:
        raise ValueError("API did not return an image")

    image = getattr(generated[0], "image", None)
    image_bytes = getattr(image, "image_bytes", None)
    if not image_bytes:
        raise ValueError("API did not return an image")

    mime_type = getattr(image, "mime_type", None) or default_mime_type
    return GatewayResponse(
        kind=ResponseKind.IMAGE,
        image=InlineImage(mime_type=mime_type, data=image_bytes),
    )
