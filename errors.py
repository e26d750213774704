from typing import Any, Optional


class GalleryError(Exception):
    """Base class for errors raised by the gallery service"""


class ConfigurationError(GalleryError):
    """A required credential or service setting is missing"""

    public_message = "Server configuration error. Please contact support."
    public_detail = "A required service setting is missing."


class BadRequestError(GalleryError):
    """The request is malformed; the message is safe to show to the user"""


class UpstreamError(GalleryError):
    """A storage, mail or verification backend failed or answered non-2xx"""

    def __init__(
        self,
        message: str,
        payload: Any = None,
        status_code: Optional[int] = None,
        public_message: str = "Upstream service error",
    ):
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code
        self.public_message = public_message


class PartialDataError(GalleryError):
    """A single metadata record could not be read; the loader skips it"""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
