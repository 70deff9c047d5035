"""
User-friendly error messages and status codes.

This module provides centralized error message definitions that are
user-friendly and avoid exposing technical implementation details.
Gateway diagnostics are logged where they happen; only the messages
below ever reach a client.
"""
from typing import Tuple, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Validation Errors (400)
    EMPTY_PROMPT = "EMPTY_PROMPT"
    EMPTY_IMPROVE_PROMPT = "EMPTY_IMPROVE_PROMPT"
    EMPTY_EDIT_PROMPT = "EMPTY_EDIT_PROMPT"
    EMPTY_CHAT_MESSAGE = "EMPTY_CHAT_MESSAGE"
    NO_IMAGE_SELECTED = "NO_IMAGE_SELECTED"
    INVALID_IMAGE_FILE = "INVALID_IMAGE_FILE"
    EMPTY_IMAGE_FILE = "EMPTY_IMAGE_FILE"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"

    # Conflict (409)
    ACTION_IN_PROGRESS = "ACTION_IN_PROGRESS"

    # Not Found Errors (404)
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"

    # Gateway Errors (502)
    IMPROVE_FAILED = "IMPROVE_FAILED"
    VARIATIONS_FAILED = "VARIATIONS_FAILED"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"
    EDIT_FAILED = "EDIT_FAILED"
    CHAT_FAILED = "CHAT_FAILED"

    # Configuration Errors (500)
    MISSING_API_KEY = "MISSING_API_KEY"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# User-friendly error messages mapped to error codes
ERROR_MESSAGES = {
    # Validation Errors
    ErrorCode.EMPTY_PROMPT: "Please enter a prompt to generate images.",
    ErrorCode.EMPTY_IMPROVE_PROMPT: "Please enter a prompt to improve.",
    ErrorCode.EMPTY_EDIT_PROMPT: "Please enter an editing prompt.",
    ErrorCode.EMPTY_CHAT_MESSAGE: "Please enter a message.",
    ErrorCode.NO_IMAGE_SELECTED: "Please upload an image first.",
    ErrorCode.INVALID_IMAGE_FILE: "Please upload a valid image file (PNG, JPG, etc.).",
    ErrorCode.EMPTY_IMAGE_FILE: "The uploaded file is empty. Please choose another image.",
    ErrorCode.IMAGE_TOO_LARGE: "The uploaded image is too large. Please choose a smaller image.",

    # Conflict
    ErrorCode.ACTION_IN_PROGRESS: "This action is already in progress. Please wait for it to finish.",

    # Not Found Errors
    ErrorCode.SESSION_NOT_FOUND: "Your studio session has expired. Please start a new one.",
    ErrorCode.IMAGE_NOT_FOUND: "The image you're looking for is no longer available.",

    # Gateway Errors
    ErrorCode.IMPROVE_FAILED: "Failed to improve prompt. Please try again.",
    ErrorCode.VARIATIONS_FAILED: "Failed to create prompt variations. Please try again.",
    ErrorCode.IMAGE_GENERATION_FAILED: "Failed to generate an image. Please try again.",
    ErrorCode.EDIT_FAILED: "Failed to edit image. Please try again.",
    ErrorCode.CHAT_FAILED: "Failed to get chat response. Please try again.",

    # Configuration Errors
    ErrorCode.MISSING_API_KEY: "The service is not properly configured. Please contact support.",

    # Generic Errors
    ErrorCode.UNKNOWN_ERROR: "Something unexpected happened. Please try again.",
}


# HTTP status codes for each error type
ERROR_STATUS_CODES = {
    ErrorCode.EMPTY_PROMPT: 400,
    ErrorCode.EMPTY_IMPROVE_PROMPT: 400,
    ErrorCode.EMPTY_EDIT_PROMPT: 400,
    ErrorCode.EMPTY_CHAT_MESSAGE: 400,
    ErrorCode.NO_IMAGE_SELECTED: 400,
    ErrorCode.INVALID_IMAGE_FILE: 400,
    ErrorCode.EMPTY_IMAGE_FILE: 400,
    ErrorCode.IMAGE_TOO_LARGE: 413,

    ErrorCode.ACTION_IN_PROGRESS: 409,

    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.IMAGE_NOT_FOUND: 404,

    ErrorCode.IMPROVE_FAILED: 502,
    ErrorCode.VARIATIONS_FAILED: 502,
    ErrorCode.IMAGE_GENERATION_FAILED: 502,
    ErrorCode.EDIT_FAILED: 502,
    ErrorCode.CHAT_FAILED: 502,

    ErrorCode.MISSING_API_KEY: 500,

    ErrorCode.UNKNOWN_ERROR: 500,
}


def get_error_response(
    error_code: ErrorCode,
    custom_message: Optional[str] = None
) -> Tuple[str, int]:
    """
    Get user-friendly error message and HTTP status code.

    Args:
        error_code: The error code enum
        custom_message: Optional custom message to append to the standard message

    Returns:
        Tuple of (error_message, status_code)
    """
    message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)

    if custom_message:
        message = f"{message} {custom_message}"

    return message, status_code
