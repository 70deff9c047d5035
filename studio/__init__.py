"""Studio session module."""
from studio.controller import StudioSession, DEFAULT_GENERATE_PROMPT, DEFAULT_EDIT_PROMPT
from studio.models import StudioAction, ActionStatus, ActionState, StudioSnapshot
from studio.store import SessionStore, store

__all__ = [
    "StudioSession",
    "DEFAULT_GENERATE_PROMPT",
    "DEFAULT_EDIT_PROMPT",
    "StudioAction",
    "ActionStatus",
    "ActionState",
    "StudioSnapshot",
    "SessionStore",
    "store"
]
