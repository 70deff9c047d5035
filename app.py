"""
FastAPI application for the Gemini image studio.

Features:
- Prompt improvement and structured prompt variations with a fallback path
- Concurrent three-image generation batches
- Image editing from an uploaded source image
- Chat with transcript rollback on failure
- In-memory studio sessions, one state record per user action
"""
import json
import time
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from config import Config
from common.error_messages import ErrorCode, get_error_response
from common.errors import StudioError
from studio.routes import router as studio_router
from utils.logger import get_logger

logger = get_logger("main")

# Sensitive fields that should be masked in logs
SENSITIVE_FIELDS = {
    'api_key', 'gemini_api_key', 'secret', 'authorization', 'token'
}

MAX_LOGGED_BODY_CHARS = 2000


def mask_sensitive_data(data: Any, mask_value: str = "***MASKED***") -> Any:
    """
    Recursively mask sensitive fields in data structures.

    Args:
        data: Data to mask (dict, list, or string)
        mask_value: Value to replace sensitive data with

    Returns:
        Data with sensitive fields masked
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_FIELDS:
                masked[key] = mask_value
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked
    elif isinstance(data, list):
        return [mask_sensitive_data(item, mask_value) for item in data]
    elif isinstance(data, str):
        # Try to parse as JSON and mask if successful
        try:
            parsed = json.loads(data)
            if isinstance(parsed, (dict, list)):
                return json.dumps(mask_sensitive_data(parsed, mask_value))
        except (json.JSONDecodeError, ValueError):
            pass
        return data
    else:
        return data


def _truncate(text: str) -> str:
    if len(text) > MAX_LOGGED_BODY_CHARS:
        return text[:MAX_LOGGED_BODY_CHARS] + "... [truncated]"
    return text


# Validate configuration on startup
try:
    Config.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    logger.error("Please set required environment variables in .env file")

app = FastAPI(
    title="Gemini Image Studio API",
    description="Generate, edit and chat about images with Gemini. Prompt variations fall back to a local synthesis path when structured output fails.",
    version="1.0.0"
)


# CORS middleware - added first so it runs on all responses (including errors and OPTIONS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    """Render validation and gateway failures with their user-facing message only."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions globally."""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    message, status_code = get_error_response(ErrorCode.UNKNOWN_ERROR)
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": ErrorCode.UNKNOWN_ERROR.value}
    )


# Request logging middleware - runs after CORS middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing; JSON bodies are masked and truncated."""
    start_time = time.time()
    full_url = str(request.url)

    try:
        request_body = None
        is_json_request = request.headers.get("content-type", "").startswith("application/json")
        if request.method in ["POST", "PUT", "PATCH"] and is_json_request:
            body_bytes = await request.body()
            if body_bytes:
                request_body = _truncate(mask_sensitive_data(body_bytes.decode("utf-8", errors="replace")))

        log_msg = f"→ {request.method} {full_url} - Client: {request.client.host if request.client else 'unknown'}"
        if request_body:
            log_msg += f"\n  Request Body: {request_body}"
        logger.info(log_msg)

        response = await call_next(request)

        # Binary downloads are passed through untouched
        if response.headers.get("content-type", "").startswith("application/json"):
            response_body_bytes = b""
            async for chunk in response.body_iterator:
                response_body_bytes += chunk
            response_body = _truncate(mask_sensitive_data(response_body_bytes.decode("utf-8", errors="replace")))
            response = Response(
                content=response_body_bytes,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type
            )
            logger.debug(f"  Response Body: {response_body}")

        process_time = (time.time() - start_time) * 1000
        logger.info(f"← {request.method} {full_url} - Status: {response.status_code} - Time: {process_time:.2f}ms")
        return response
    except Exception as e:
        process_time = (time.time() - start_time) * 1000
        logger.error(f"← {request.method} {full_url} - Error: {str(e)} - Time: {process_time:.2f}ms")
        raise


app.include_router(studio_router)
logger.info("Studio router included")


@app.on_event("startup")
async def startup_event():
    """Log startup event."""
    logger.info("=" * 80)
    logger.info("Image studio starting up")
    logger.info(f"Models: text={Config.GEMINI_TEXT_MODEL} variations={Config.GEMINI_VARIATION_MODEL} "
                f"image={Config.GEMINI_IMAGE_MODEL} edit={Config.GEMINI_EDIT_MODEL}")
    logger.info(f"Host: {Config.HOST}:{Config.PORT}")
    logger.info("=" * 80)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown event."""
    logger.info("=" * 80)
    logger.info("Image studio shutting down")
    logger.info("=" * 80)


@app.get("/healthz")
def health():
    """Health check endpoint."""
    logger.debug("Health check requested")
    return {"status": "ok"}


# Run server directly
if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    uvicorn.run(
        "app:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True,
        log_level="info"
    )
