"""Custom exceptions for the artwork embedder application."""


class ArtworkEmbedderError(Exception):
    """Base exception for all artwork embedder errors."""

    def __init__(self, message: str, details: str = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(ArtworkEmbedderError):
    """Raised when credentials or external tools are missing."""

    def __init__(self, message: str, parameter: str = None, details: str = None):
        super().__init__(message, details)
        self.parameter = parameter


class MediaToolError(ArtworkEmbedderError):
    """Raised when ffprobe or ffmpeg fails; details carry the tool output."""

    def __init__(
        self,
        message: str,
        file_path: str = None,
        tool: str = None,
        details: str = None,
    ):
        super().__init__(message, details)
        self.file_path = file_path
        self.tool = tool


class MetadataError(ArtworkEmbedderError):
    """Raised when audio tags cannot be read."""

    def __init__(self, message: str, file_path: str = None, details: str = None):
        super().__init__(message, details)
        self.file_path = file_path


class DownloadError(ArtworkEmbedderError):
    """Raised when the artwork image cannot be downloaded."""

    def __init__(self, message: str, url: str = None, details: str = None):
        super().__init__(message, details)
        self.url = url


class FileOperationError(ArtworkEmbedderError):
    """Raised when file system operations fail."""

    def __init__(
        self,
        message: str,
        file_path: str = None,
        operation: str = None,
        details: str = None,
    ):
        super().__init__(message, details)
        self.file_path = file_path
        self.operation = operation


class CommitError(ArtworkEmbedderError):
    """Raised when a transactional commit stage fails."""

    def __init__(
        self,
        message: str,
        file_path: str = None,
        stage: str = None,
        details: str = None,
        restored: bool = False,
    ):
        super().__init__(message, details)
        self.file_path = file_path
        self.stage = stage
        self.restored = restored


class EmbeddingError(CommitError):
    """Raised when every embedding attempt for a file has failed."""

    def __init__(
        self,
        message: str,
        file_path: str = None,
        attempts: list = None,
        details: str = None,
    ):
        super().__init__(message, file_path=file_path, stage="embed", details=details)
        self.attempts = attempts or []
