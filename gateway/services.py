"""Gemini request client - one async call per gateway operation."""
import base64
from typing import List, Sequence

from google import genai
from google.genai import types

from config import Config
from common.error_messages import ErrorCode
from common.errors import GatewayError
from common.models import ChatMessage, ChatRole, GeneratedImage, PromptSet
from gateway.decoders import (
    decode_content_image,
    decode_generated_image,
    decode_string_array,
    decode_text,
)
from gateway.models import InlineImage
from utils.logger import get_logger

logger = get_logger("gateway.services")

IMPROVE_PROMPT_TEMPLATE = (
    "Improve this image generation prompt for clarity, detail, and creative potential. "
    "Return only the improved prompt, without any preamble or explanation. "
    'Original prompt: "{prompt}"'
)

VARIATIONS_PROMPT_TEMPLATE = (
    "Based on the following image generation prompt, create two more distinct and creative "
    "variations. Return a JSON array of three prompts in total (the original improved, and "
    "two new ones). The prompts should be detailed and imaginative. "
    'Base Prompt: "{prompt}". Return ONLY the JSON array of strings.'
)


def _get_client() -> genai.Client:
    """Create a Gemini client; the API key never leaves this process."""
    return genai.Client(api_key=Config.get_gemini_api_key())


def _to_generated_image(image: InlineImage, prompt: str) -> GeneratedImage:
    return GeneratedImage(
        prompt=prompt,
        mime_type=image.mime_type,
        data=base64.b64encode(image.data).decode("ascii"),
    )


def build_chat_contents(history: Sequence[ChatMessage], new_message: str) -> List[types.Content]:
    """Convert a transcript plus the new user turn to Gemini Content objects."""
    contents = [
        types.Content(role=msg.role.value, parts=[types.Part.from_text(text=msg.text)])
        for msg in history
        if msg.text
    ]
    contents.append(
        types.Content(role=ChatRole.USER.value, parts=[types.Part.from_text(text=new_message)])
    )
    return contents


async def improve_prompt(prompt: str) -> str:
    """
    Ask the text model for a clearer, more detailed version of ``prompt``.

    Returns:
        The improved prompt, trimmed

    Raises:
        GatewayError: on any transport or decode failure
    """
    try:
        client = _get_client()
        response = await client.aio.models.generate_content(
            model=Config.GEMINI_TEXT_MODEL,
            contents=IMPROVE_PROMPT_TEMPLATE.format(prompt=prompt),
        )
        decoded = decode_text(response)
    except Exception as e:
        logger.error(f"Error improving prompt: {e}")
        raise GatewayError(ErrorCode.IMPROVE_FAILED, str(e)) from e

    logger.info(f"Improved prompt ({len(prompt)} -> {len(decoded.text)} chars)")
    return decoded.text


async def get_prompt_variations(base_prompt: str) -> PromptSet:
    """
    Request a JSON array of prompt variations using structured output.

    Returns:
        PromptSet holding the first (at most) three prompts in gateway order

    Raises:
        GatewayError: if the array is missing, empty or malformed
    """
    try:
        client = _get_client()
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(
                    type=types.Type.STRING,
                    description="A creative and detailed prompt for an image generation model.",
                ),
            ),
        )
        response = await client.aio.models.generate_content(
            model=Config.GEMINI_VARIATION_MODEL,
            contents=VARIATIONS_PROMPT_TEMPLATE.format(prompt=base_prompt),
            config=config,
        )
        decoded = decode_string_array(response)
        prompt_set = PromptSet.from_items(decoded.items)
    except Exception as e:
        logger.error(f"Error getting prompt variations: {e}")
        raise GatewayError(ErrorCode.VARIATIONS_FAILED, str(e)) from e

    logger.info(f"Received {len(decoded.items)} prompt variation(s), keeping {len(prompt_set.prompts)}")
    return prompt_set


async def generate_image(prompt: str) -> GeneratedImage:
    """Generate exactly one square image for ``prompt``."""
    try:
        client = _get_client()
        response = await client.aio.models.generate_images(
            model=Config.GEMINI_IMAGE_MODEL,
            prompt=prompt,
            config=types.GenerateImagesConfig(
                number_of_images=1,
                output_mime_type=Config.IMAGE_OUTPUT_MIME_TYPE,
                aspect_ratio=Config.IMAGE_ASPECT_RATIO,
            ),
        )
        decoded = decode_generated_image(response, Config.IMAGE_OUTPUT_MIME_TYPE)
    except Exception as e:
        logger.error(f'Error generating image for prompt "{prompt[:50]}": {e}')
        raise GatewayError(ErrorCode.IMAGE_GENERATION_FAILED, str(e)) from e

    logger.info(f"Generated image ({decoded.image.mime_type}, {len(decoded.image.data)} bytes)")
    return _to_generated_image(decoded.image, prompt)


async def edit_image(source_image: str, mime_type: str, edit_prompt: str) -> GeneratedImage:
    """
    Apply a text instruction to an existing image.

    Args:
        source_image: Base64-encoded source image bytes
        mime_type: MIME type of the source image
        edit_prompt: Editing instruction

    Raises:
        GatewayError: if the call fails or the answer carries no image part
    """
    try:
        client = _get_client()
        contents = types.Content(
            role=ChatRole.USER.value,
            parts=[
                types.Part(inline_data=types.Blob(mime_type=mime_type, data=base64.b64decode(source_image))),
                types.Part.from_text(text=edit_prompt),
            ],
        )
        response = await client.aio.models.generate_content(
            model=Config.GEMINI_EDIT_MODEL,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
        )
        decoded = decode_content_image(response)
    except Exception as e:
        logger.error(f"Error editing image: {e}")
        raise GatewayError(ErrorCode.EDIT_FAILED, str(e)) from e

    logger.info(f"Edited image ({decoded.image.mime_type}, {len(decoded.image.data)} bytes)")
    return _to_generated_image(decoded.image, edit_prompt)


async def get_chat_response(history: Sequence[ChatMessage], new_message: str) -> str:
    """Send the whole transcript followed by ``new_message``; return the trimmed reply."""
    try:
        client = _get_client()
        contents = build_chat_contents(history, new_message)
        logger.info(f"Sending chat request with {len(contents)} turn(s)")
        response = await client.aio.models.generate_content(
            model=Config.GEMINI_TEXT_MODEL,
            contents=contents,
        )
        decoded = decode_text(response)
    except Exception as e:
        logger.error(f"Error getting chat response: {e}")
        raise GatewayError(ErrorCode.CHAT_FAILED, str(e)) from e

    return decoded.text
