"""Studio session routes."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Path, UploadFile
from fastapi.responses import Response

from common.error_messages import ErrorCode
from common.errors import StudioError
from common.models import GeneratedImage
from image.services import download_filename
from studio.controller import StudioSession
from studio.models import (
    ActionState,
    ActionStatus,
    ChatRequest,
    PromptRequest,
    StudioSnapshot,
)
from studio.store import store
from utils.logger import get_logger

logger = get_logger("studio.routes")
router = APIRouter(prefix="/api/sessions", tags=["studio"])


def get_session(session_id: str = Path(...)) -> StudioSession:
    """Resolve the session path parameter or answer 404."""
    try:
        return store.get(session_id)
    except KeyError:
        raise StudioError(ErrorCode.SESSION_NOT_FOUND, f"unknown session {session_id}")


def _render(session: StudioSession, state: ActionState) -> StudioSnapshot:
    """Return the session snapshot, or raise the recorded failure of this action."""
    if state.status == ActionStatus.FAILED and state.error_code is not None:
        raise StudioError(state.error_code)
    return session.snapshot()


def _image_download(image: Optional[GeneratedImage]) -> Response:
    if image is None:
        raise StudioError(ErrorCode.IMAGE_NOT_FOUND)
    filename = download_filename(image.prompt)
    return Response(
        content=image.to_bytes(),
        media_type=image.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=StudioSnapshot, status_code=201)
def create_session():
    """Start a new studio session with the default prompts."""
    session = store.create()
    return session.snapshot()


@router.get("/{session_id}", response_model=StudioSnapshot)
def read_session(session: StudioSession = Depends(get_session)):
    """Render the current session state."""
    return session.snapshot()


@router.delete("/{session_id}")
def delete_session(session_id: str = Path(...)):
    try:
        store.delete(session_id)
    except KeyError:
        raise StudioError(ErrorCode.SESSION_NOT_FOUND)
    return {"deleted": True, "session_id": session_id}


@router.post("/{session_id}/improve", response_model=StudioSnapshot)
async def improve_prompt(req: PromptRequest, session: StudioSession = Depends(get_session)):
    """Replace the session prompt with an improved version."""
    state = await session.improve(req.prompt)
    return _render(session, state)


@router.post("/{session_id}/generate", response_model=StudioSnapshot)
async def generate_images(req: PromptRequest, session: StudioSession = Depends(get_session)):
    """
    Generate a batch of images.

    Behavior:
      - build a prompt set (structured variations, or improve + fixed suffixes)
      - request one image per prompt concurrently; any failure fails the batch
      - a newer generate request supersedes this one's results
    """
    state = await session.generate(req.prompt)
    return _render(session, state)


@router.post("/{session_id}/upload", response_model=StudioSnapshot)
async def upload_image(file: UploadFile = File(...), session: StudioSession = Depends(get_session)):
    """Select the image to edit (multipart/form-data)."""
    try:
        data = await file.read()
    except Exception as e:
        logger.error(f"Failed to read uploaded file: {e}")
        raise StudioError(ErrorCode.EMPTY_IMAGE_FILE, str(e))

    state = session.select_image(file.filename, file.content_type, data)
    return _render(session, state)


@router.post("/{session_id}/edit", response_model=StudioSnapshot)
async def apply_edit(req: PromptRequest, session: StudioSession = Depends(get_session)):
    """Apply an edit instruction to the uploaded image."""
    state = await session.apply_edit(req.prompt)
    return _render(session, state)


@router.post("/{session_id}/chat", response_model=StudioSnapshot)
async def send_chat(req: ChatRequest, session: StudioSession = Depends(get_session)):
    """Send a chat message; the transcript comes back with the reply appended."""
    state = await session.send_chat(req.message)
    return _render(session, state)


@router.get("/{session_id}/images/{index}/download")
def download_generated_image(index: int = Path(..., ge=0), session: StudioSession = Depends(get_session)):
    """Download one image of the latest batch."""
    image = session.images[index] if index < len(session.images) else None
    return _image_download(image)


@router.get("/{session_id}/edited/download")
def download_edited_image(session: StudioSession = Depends(get_session)):
    """Download the latest edit result."""
    return _image_download(session.edited_image)
