"""Image services - prompt variation workflow, generation batches, upload and download boundaries."""
import asyncio
import base64
import re
from typing import List, Optional

from config import Config
from common.error_messages import ErrorCode
from common.errors import GatewayError, ValidationError
from common.models import GeneratedImage, PromptSet, SourceImage
from gateway import services as gateway_services
from utils.logger import get_logger

logger = get_logger("image.services")

# Appended to the improved prompt when structured variations are unavailable
FALLBACK_SUFFIXES = (", cinematic lighting", ", in the style of vaporwave")

DOWNLOAD_NAME_LENGTH = 30
DOWNLOAD_FALLBACK_NAME = "edited-image"
DOWNLOAD_EXTENSION = ".jpeg"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def fallback_prompt_set(improved_prompt: str) -> PromptSet:
    """The improved prompt followed by one variant per fixed stylistic suffix."""
    return PromptSet(prompts=(improved_prompt,) + tuple(f"{improved_prompt}{s}" for s in FALLBACK_SUFFIXES))


async def build_prompt_set(base_prompt: str) -> PromptSet:
    """
    Produce up to three diversified prompts for one generation batch.

    Tries the structured variations request first. Any failure there is
    absorbed and replaced by a plain improve request plus two locally
    synthesized variants.

    Args:
        base_prompt: Prompt typed by the user

    Returns:
        PromptSet (1-3 prompts on the structured path, exactly 3 on fallback)

    Raises:
        GatewayError: only when the fallback improve request itself fails
    """
    try:
        prompt_set = await gateway_services.get_prompt_variations(base_prompt)
        return PromptSet.from_items(prompt_set.prompts)
    except Exception as e:
        logger.warning(f"Structured prompt variations failed ({e}), falling back to simpler prompt improvement")

    improved = await gateway_services.improve_prompt(base_prompt)
    return fallback_prompt_set(improved)


async def generate_batch(prompt_set: PromptSet) -> List[GeneratedImage]:
    """
    Generate one image per prompt concurrently, all-or-nothing.

    Raises:
        GatewayError: if any single image request fails; no partial results
    """
    logger.info(f"Generating batch of {len(prompt_set.prompts)} image(s)")
    results = await asyncio.gather(
        *(gateway_services.generate_image(prompt) for prompt in prompt_set.prompts),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        logger.error(f"{len(failures)} of {len(results)} image request(s) failed, dropping the batch")
        first = failures[0]
        if isinstance(first, GatewayError):
            raise first
        raise GatewayError(ErrorCode.IMAGE_GENERATION_FAILED, str(first)) from first

    return list(results)


def validate_image_upload(filename: Optional[str], content_type: Optional[str], data: bytes) -> SourceImage:
    """
    Accept a single uploaded image file.

    Runs before any gateway call; rejects declared non-image types, empty
    files and files above Config.MAX_UPLOAD_BYTES.
    """
    if not content_type or not content_type.startswith("image/"):
        logger.info(f"Rejected upload {filename!r} with content type {content_type!r}")
        raise ValidationError(ErrorCode.INVALID_IMAGE_FILE, f"content type {content_type!r}")
    if not data:
        raise ValidationError(ErrorCode.EMPTY_IMAGE_FILE)
    if len(data) > Config.MAX_UPLOAD_BYTES:
        raise ValidationError(
            ErrorCode.IMAGE_TOO_LARGE,
            f"{len(data)} bytes exceeds limit of {Config.MAX_UPLOAD_BYTES}",
        )

    return SourceImage(
        filename=filename or "",
        mime_type=content_type,
        data=base64.b64encode(data).decode("ascii"),
    )


def download_filename(prompt: str) -> str:
    """
    Derive a download filename from a prompt.

    First 30 characters, non-alphanumerics stripped, lower-cased, with a
    fixed fallback name when nothing is left.
    """
    stem = _NON_ALPHANUMERIC.sub("", (prompt or "")[:DOWNLOAD_NAME_LENGTH]).lower()
    return f"{stem or DOWNLOAD_FALLBACK_NAME}{DOWNLOAD_EXTENSION}"
