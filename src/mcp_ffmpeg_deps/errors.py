"""Error handling for ffmpeg dependency provisioning."""
import logging
from typing import Any, Dict, Optional
from mcp.types import (
    ErrorData,
    INVALID_REQUEST,
    INVALID_PARAMS,
    INTERNAL_ERROR
)


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, ProvisionError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    logger.error("Provisioning error occurred", extra={"data": error_info})


class ProvisionError(Exception):
    """Base error class for dependency provisioning."""
    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_error_data(self) -> ErrorData:
        """Convert to ErrorData format."""
        return ErrorData(
            code=self.code,
            message=str(self),
            data=self.details
        )


class BinaryNotFoundError(ProvisionError):
    """Neither a bundled nor a system binary was found."""
    def __init__(self, binary_name: str, searched: Optional[list[str]] = None):
        super().__init__(
            f"Binary {binary_name} not found",
            code=INVALID_REQUEST,
            details={"binary_name": binary_name, "searched": searched or []}
        )


class BinaryValidationError(ProvisionError):
    """A candidate binary did not identify itself as expected."""
    def __init__(self, binary_name: str, path: str, output: str):
        super().__init__(
            f"Unexpected stdout when loading {binary_name}:\n{output}",
            details={"binary_name": binary_name, "path": path}
        )
        self.output = output


class EmptyArchiveError(ProvisionError):
    """Extraction produced no entries."""
    def __init__(self, archive: str):
        super().__init__(
            "Extracted archive files list is empty.",
            details={"archive": archive}
        )


class ArchiveStructureError(ProvisionError):
    """Archive layout differs from what the install plan expects."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Unexpected archive structure: {message}",
            details=details
        )


class UnsupportedPlatformError(ProvisionError):
    """No install recipe for this operating system."""
    def __init__(self, system: str):
        super().__init__(
            f"Unsupported operating system: {system}",
            code=INVALID_REQUEST,
            details={"system": system}
        )


class UnknownDependencyError(ProvisionError):
    """Dependency name was never registered."""
    def __init__(self, name: str):
        super().__init__(
            f"Unknown dependency: {name}",
            code=INVALID_PARAMS,
            details={"name": name}
        )


class DownloadError(ProvisionError):
    """Remote archive could not be fetched."""
    def __init__(self, url: str, status: Optional[int] = None):
        super().__init__(
            f"Failed to download {url}",
            details={"url": url, "status": status}
        )
