"""Image generation module."""
from image.services import (
    FALLBACK_SUFFIXES,
    build_prompt_set,
    fallback_prompt_set,
    generate_batch,
    validate_image_upload,
    download_filename
)

__all__ = [
    "FALLBACK_SUFFIXES",
    "build_prompt_set",
    "fallback_prompt_set",
    "generate_batch",
    "validate_image_upload",
    "download_filename"
]
