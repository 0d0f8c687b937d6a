class AppError(Exception):
    """Base application error"""

    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ConfigError(AppError):
    """Missing or invalid configuration"""


class SessionNotFoundError(AppError):
    """Session ID not found in the registry"""


class ReadError(AppError):
    """Local file could not be read"""

    default_message = "Failed to read the uploaded file."


class FetchError(AppError):
    """Remote image URL could not be fetched"""

    default_message = "Failed to fetch the background image."


class RemoteSoftFailure(AppError):
    """Model call completed but returned no usable image"""

    default_message = "The AI did not return an image."


class RemoteTransportFailure(AppError):
    """Network or API-level failure while calling the model"""

    default_message = "The image service could not be reached."


class BackgroundUnavailableError(AppError):
    """Selected background has no image to composite onto"""

    default_message = "Selected background is not available."


class InvalidSelectionError(AppError):
    """Background selection refers to an unknown preset or bad color"""


class OperationInProgressError(AppError):
    """Another upload/generate is still running for this session"""

    default_message = "Another operation is still in progress."


class NothingToExportError(AppError):
    """No final image has been generated yet"""

    default_message = "There is no generated image to download."
