"""Exception types shared by the gateway client and the studio controller."""
from typing import Optional

from common.error_messages import ErrorCode, get_error_response


class StudioError(Exception):
    """
    Base error carrying an ErrorCode.

    ``message`` is what the user sees; ``detail`` is diagnostic text that is
    logged but never rendered.
    """

    def __init__(self, code: ErrorCode, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        self.message, self.status_code = get_error_response(code)
        super().__init__(detail or self.message)


class ValidationError(StudioError):
    """Precondition failure. Raised before any gateway call is made."""


class GatewayError(StudioError):
    """The remote AI service failed or answered without the expected fields."""
