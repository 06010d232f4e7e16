"""
Failure taxonomy for the image pipeline.

The image client and decoder raise these; the fetch coordinator decides
whether a failure is masked by cached art; the HTTP layer maps them to a
status code.
"""
from datetime import datetime, timezone


class CatsciiError(Exception):
    """Base class for every classified pipeline failure."""

    default_message = "Pipeline failure"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        self.occurred_at = datetime.now(timezone.utc)
        super().__init__(self.message)


# ============================================================================
# Fetch failures
# ============================================================================

class FetchFailure(CatsciiError):
    """The upstream image provider could not deliver an image."""
    default_message = "Could not fetch a cat image"


class NetworkTimeout(FetchFailure):
    """The upstream did not answer within the fetch timeout."""
    default_message = "Timed out waiting for the cat image provider"


class UpstreamStatusError(FetchFailure):
    """The upstream answered with a non-success HTTP status."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Cat image provider returned HTTP {status_code}")


class UpstreamUnavailable(FetchFailure):
    """The upstream could not be reached (DNS, refused connection, ...)."""
    default_message = "Cat image provider is unreachable"


class MalformedEnvelope(FetchFailure):
    """The JSON search response did not contain an image URL."""
    default_message = "Cat image provider sent an unexpected response"


class EmptyPayload(FetchFailure):
    """The upstream answered successfully but with nothing in it."""
    default_message = "Cat image provider returned no image"


# ============================================================================
# Decode failures
# ============================================================================

class DecodeFailure(CatsciiError):
    """The fetched bytes could not be turned into pixels."""
    default_message = "Could not decode the cat image"


class UnsupportedImageFormat(DecodeFailure):
    default_message = "Cat image is in an unsupported format"


class CorruptImageData(DecodeFailure):
    default_message = "Cat image data is corrupt"
