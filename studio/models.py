"""Studio session Pydantic models."""
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field

from common.error_messages import ErrorCode
from common.errors import StudioError
from common.models import ChatMessage


class StudioAction(str, Enum):
    """User actions, each with its own state record."""
    IMPROVE = "improve"
    GENERATE = "generate"
    EDIT = "edit"
    CHAT = "chat"


class ActionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ActionState(BaseModel):
    """Latest outcome of one action: status plus either a payload or an error."""
    status: ActionStatus = ActionStatus.IDLE
    payload: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ActionStatus.PENDING

    def start(self) -> None:
        self.status = ActionStatus.PENDING
        self.payload = None
        self.error = None
        self.error_code = None

    def succeed(self, payload: Any = None) -> None:
        self.status = ActionStatus.SUCCEEDED
        self.payload = payload
        self.error = None
        self.error_code = None

    def fail(self, error: StudioError) -> None:
        self.status = ActionStatus.FAILED
        self.payload = None
        self.error = error.message
        self.error_code = error.code

    def reset(self) -> None:
        self.status = ActionStatus.IDLE
        self.payload = None
        self.error = None
        self.error_code = None


# ---------- Request bodies ----------
class PromptRequest(BaseModel):
    prompt: Optional[str] = Field(None, description="Replaces the session prompt before the action runs")


class ChatRequest(BaseModel):
    message: str = Field(..., description="New user chat message")


# ---------- Rendered views ----------
class ImageView(BaseModel):
    """A generated or edited image as rendered to the client."""
    prompt: str = Field(..., description="Prompt that produced the image")
    mime_type: str = Field(..., description="Image MIME type")
    data_url: str = Field(..., description="data: URL ready for an <img> tag")
    download_name: str = Field(..., description="Suggested download filename")


class SourceImageView(BaseModel):
    filename: str = Field("", description="Uploaded filename")
    mime_type: str = Field(..., description="Declared MIME type")
    data_url: str = Field(..., description="data: URL of the uploaded image")


class ActionStateView(BaseModel):
    status: ActionStatus
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class StudioSnapshot(BaseModel):
    """Everything the studio page needs to render a session."""
    session_id: str = Field(..., description="Studio session identifier")
    prompt: str = Field(..., description="Current generate prompt")
    edit_prompt: str = Field(..., description="Current edit instruction")
    prompt_set: List[str] = Field(default_factory=list, description="Prompts of the latest batch")
    images: List[ImageView] = Field(default_factory=list, description="Images of the latest batch")
    source_image: Optional[SourceImageView] = Field(None, description="Image selected for editing")
    edited_image: Optional[ImageView] = Field(None, description="Latest edit result")
    transcript: List[ChatMessage] = Field(default_factory=list, description="Chat transcript")
    actions: Dict[StudioAction, ActionStateView] = Field(default_factory=dict, description="Per-action state")
