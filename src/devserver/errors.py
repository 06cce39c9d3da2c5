"""Exceptions raised while serving a request.

Each one means the host environment, not the client, is at fault. The
application turns them into ``500`` responses and keeps serving.
"""


class DevServerError(Exception):
    """Base class for environment failures during a request."""


class OutboundIPError(DevServerError):
    """Raised when the host's outbound address cannot be determined."""


class TemplateLoadError(DevServerError):
    """Raised when the HTML template is missing or cannot be compiled."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
