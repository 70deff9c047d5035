"""Core studio data models shared by the gateway client, workflow and controller."""
import base64
from enum import Enum
from typing import List, Tuple, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PROMPTS_PER_SET = 3


class ChatRole(str, Enum):
    """Transcript roles, named the way the Gemini API names them."""
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    """One turn of a chat transcript."""
    role: ChatRole = Field(..., description="Who produced this turn")
    text: str = Field(..., description="Single text segment of the turn")


class PromptSet(BaseModel):
    """Ordered, immutable group of 1..3 prompts feeding one generation batch."""
    model_config = ConfigDict(frozen=True)

    prompts: Tuple[str, ...] = Field(..., description="Prompts in gateway order")

    @field_validator("prompts")
    @classmethod
    def _check_prompts(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("a prompt set needs at least one prompt")
        if len(value) > MAX_PROMPTS_PER_SET:
            raise ValueError(f"a prompt set holds at most {MAX_PROMPTS_PER_SET} prompts")
        for prompt in value:
            if not isinstance(prompt, str) or not prompt.strip():
                raise ValueError("prompts must be non-empty strings")
        return value

    @classmethod
    def from_items(cls, items: Sequence) -> "PromptSet":
        """
        Build a set from an arbitrary decoded sequence.

        Keeps the first three items, never pads. Raises ValueError when the
        sequence is empty or holds anything other than non-empty strings.
        """
        if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
            raise ValueError(f"expected a list of prompts, got {type(items).__name__}")
        return cls(prompts=tuple(items[:MAX_PROMPTS_PER_SET]))

    def as_list(self) -> List[str]:
        return list(self.prompts)


class GeneratedImage(BaseModel):
    """An image payload paired with the prompt that produced it."""
    prompt: str = Field(..., description="Prompt or edit instruction used")
    mime_type: str = Field(..., description="Image MIME type (e.g., image/jpeg)")
    data: str = Field(..., description="Base64-encoded image bytes")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class SourceImage(BaseModel):
    """The uploaded image currently selected for editing."""
    filename: str = Field("", description="Original upload filename")
    mime_type: str = Field(..., description="Declared image MIME type")
    data: str = Field(..., description="Base64-encoded image bytes")
