"""Studio controller - sequences user actions on one in-memory session."""
from datetime import datetime, timezone
from typing import Optional, List
from uuid import uuid4

from common.error_messages import ErrorCode
from common.errors import StudioError, ValidationError, GatewayError
from common.models import ChatMessage, ChatRole, GeneratedImage, PromptSet, SourceImage
from gateway import services as gateway_services
from image import services as image_services
from studio.models import (
    ActionState,
    ActionStateView,
    ImageView,
    SourceImageView,
    StudioAction,
    StudioSnapshot,
)
from utils.logger import get_logger

logger = get_logger("studio.controller")

DEFAULT_GENERATE_PROMPT = (
    "A photorealistic image of a majestic lion wearing a crown, "
    "sitting on a throne in a lush jungle."
)
DEFAULT_EDIT_PROMPT = "Add a retro, vintage film filter"


def _image_view(image: GeneratedImage) -> ImageView:
    return ImageView(
        prompt=image.prompt,
        mime_type=image.mime_type,
        data_url=image.data_url,
        download_name=image_services.download_filename(image.prompt),
    )


class StudioSession:
    """
    UI state of one studio user.

    Each action (improve, generate, edit, chat) owns one ActionState and
    touches only its own slice of the session, so different actions may
    interleave freely. Improve, edit and chat refuse to start while their
    own previous request is pending. Generate always starts; a newer batch
    supersedes the older one, whose results are dropped when they arrive.
    """

    def __init__(self, session_id: Optional[str] = None):
        now = datetime.now(timezone.utc)
        self.id = session_id or str(uuid4())
        self.created_at = now
        self.last_active = now

        self.prompt = DEFAULT_GENERATE_PROMPT
        self.edit_prompt = DEFAULT_EDIT_PROMPT
        self.prompt_set: Optional[PromptSet] = None
        self.images: List[GeneratedImage] = []
        self.source_image: Optional[SourceImage] = None
        self.edited_image: Optional[GeneratedImage] = None
        self.transcript: List[ChatMessage] = []

        self.actions = {action: ActionState() for action in StudioAction}
        self._generation = 0

    # ---------- helpers ----------
    def touch(self) -> None:
        self.last_active = datetime.now(timezone.utc)

    def state(self, action: StudioAction) -> ActionState:
        return self.actions[action]

    def _begin(self, action: StudioAction) -> ActionState:
        state = self.actions[action]
        if state.is_pending:
            raise ValidationError(ErrorCode.ACTION_IN_PROGRESS, f"{action.value} already pending")
        self.touch()
        state.start()
        return state

    def _fail(self, action: StudioAction, state: ActionState, error: StudioError) -> ActionState:
        if isinstance(error, GatewayError):
            logger.error(f"Session {self.id}: {action.value} failed: {error.detail}")
        else:
            logger.info(f"Session {self.id}: {action.value} rejected: {error.code.value}")
        state.fail(error)
        return state

    # ---------- actions ----------
    async def improve(self, prompt: Optional[str] = None) -> ActionState:
        """Replace the generate prompt with an improved version of itself."""
        state = self._begin(StudioAction.IMPROVE)
        if prompt is not None:
            self.prompt = prompt
        if not self.prompt.strip():
            return self._fail(StudioAction.IMPROVE, state, ValidationError(ErrorCode.EMPTY_IMPROVE_PROMPT))

        try:
            improved = await gateway_services.improve_prompt(self.prompt)
        except GatewayError as e:
            return self._fail(StudioAction.IMPROVE, state, e)

        self.prompt = improved
        state.succeed(improved)
        return state

    async def generate(self, prompt: Optional[str] = None) -> ActionState:
        """Run the variation workflow, then one concurrent image batch."""
        state = self.actions[StudioAction.GENERATE]
        self.touch()
        if prompt is not None:
            self.prompt = prompt
        if not self.prompt.strip():
            return self._fail(StudioAction.GENERATE, state, ValidationError(ErrorCode.EMPTY_PROMPT))

        self._generation += 1
        generation = self._generation
        state.start()
        self.prompt_set = None
        self.images = []
        base_prompt = self.prompt

        try:
            prompt_set = await image_services.build_prompt_set(base_prompt)
            if generation != self._generation:
                return self._discard_stale(generation)
            self.prompt_set = prompt_set
            images = await image_services.generate_batch(prompt_set)
        except GatewayError as e:
            if generation != self._generation:
                return self._discard_stale(generation)
            self.prompt_set = None
            return self._fail(StudioAction.GENERATE, state, e)

        if generation != self._generation:
            return self._discard_stale(generation)

        self.images = images
        state.succeed(prompt_set.as_list())
        logger.info(f"Session {self.id}: generation {generation} produced {len(images)} image(s)")
        return state

    def _discard_stale(self, generation: int) -> ActionState:
        # the request itself is not cancelled, only its outcome is ignored
        logger.info(f"Session {self.id}: discarding results of superseded generation {generation}")
        return self.actions[StudioAction.GENERATE]

    def select_image(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> ActionState:
        """Select the image to edit. Invalid files are rejected without any gateway call."""
        state = self.actions[StudioAction.EDIT]
        if state.is_pending:
            raise ValidationError(ErrorCode.ACTION_IN_PROGRESS, "edit already pending")
        self.touch()

        try:
            source = image_services.validate_image_upload(filename, content_type, data)
        except ValidationError as e:
            return self._fail(StudioAction.EDIT, state, e)

        self.source_image = source
        self.edited_image = None
        state.reset()
        logger.info(f"Session {self.id}: selected image {source.filename!r} ({source.mime_type}, {len(data)} bytes)")
        return state

    async def apply_edit(self, edit_prompt: Optional[str] = None) -> ActionState:
        """Apply the edit instruction to the selected image."""
        state = self._begin(StudioAction.EDIT)
        if edit_prompt is not None:
            self.edit_prompt = edit_prompt
        if self.source_image is None:
            return self._fail(StudioAction.EDIT, state, ValidationError(ErrorCode.NO_IMAGE_SELECTED))
        if not self.edit_prompt.strip():
            return self._fail(StudioAction.EDIT, state, ValidationError(ErrorCode.EMPTY_EDIT_PROMPT))

        self.edited_image = None
        source = self.source_image
        try:
            edited = await gateway_services.edit_image(source.data, source.mime_type, self.edit_prompt)
        except GatewayError as e:
            return self._fail(StudioAction.EDIT, state, e)

        self.edited_image = edited
        state.succeed(edited.prompt)
        return state

    async def send_chat(self, message: str) -> ActionState:
        """
        Append a user turn and the model's reply.

        On gateway failure the user turn is removed again so the transcript
        only holds turns the gateway acknowledged.
        """
        state = self._begin(StudioAction.CHAT)
        if not message or not message.strip():
            return self._fail(StudioAction.CHAT, state, ValidationError(ErrorCode.EMPTY_CHAT_MESSAGE))

        history = list(self.transcript)
        user_turn = ChatMessage(role=ChatRole.USER, text=message)
        self.transcript.append(user_turn)

        try:
            reply = await gateway_services.get_chat_response(history, message)
        except GatewayError as e:
            self.transcript = [turn for turn in self.transcript if turn is not user_turn]
            return self._fail(StudioAction.CHAT, state, e)

        self.transcript.append(ChatMessage(role=ChatRole.MODEL, text=reply))
        state.succeed(reply)
        return state

    # ---------- rendering ----------
    def snapshot(self) -> StudioSnapshot:
        source_view = None
        if self.source_image is not None:
            source_view = SourceImageView(
                filename=self.source_image.filename,
                mime_type=self.source_image.mime_type,
                data_url=f"data:{self.source_image.mime_type};base64,{self.source_image.data}",
            )

        return StudioSnapshot(
            session_id=self.id,
            prompt=self.prompt,
            edit_prompt=self.edit_prompt,
            prompt_set=self.prompt_set.as_list() if self.prompt_set else [],
            images=[_image_view(image) for image in self.images],
            source_image=source_view,
            edited_image=_image_view(self.edited_image) if self.edited_image else None,
            transcript=list(self.transcript),
            actions={
                action: ActionStateView(status=s.status, error=s.error, error_code=s.error_code)
                for action, s in self.actions.items()
            },
        )
