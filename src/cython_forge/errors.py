"""Error handling for the build forge."""
import logging
from enum import Enum
from typing import Any, Dict, Optional

from mcp.types import ErrorData, INVALID_PARAMS, INTERNAL_ERROR


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("cython_forge")

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, ForgeError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    logger.error("Forge error occurred", extra={"data": error_info})


class ForgeError(Exception):
    """Base error class for the forge."""
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


class ValidationReason(str, Enum):
    UNSAFE_PATH = "unsafe_path"
    MISSING_FOLDER = "missing_folder"
    MISSING_BUILD_DESCRIPTOR = "missing_build_descriptor"
    MISSING_ENVIRONMENT = "missing_environment"
    INVALID_ENVIRONMENT = "invalid_environment"
    MISSING_INTERPRETER = "missing_interpreter"


VALIDATION_MESSAGES = {
    ValidationReason.UNSAFE_PATH: "Path is not safe: {path}",
    ValidationReason.MISSING_FOLDER: "No folder selected or folder does not exist: {path}",
    ValidationReason.MISSING_BUILD_DESCRIPTOR: "Selected folder does not contain setup.py: {path}",
    ValidationReason.MISSING_ENVIRONMENT: "No virtual environment selected or it does not exist: {path}",
    ValidationReason.INVALID_ENVIRONMENT: "Selected path is not a valid virtual environment: {path}",
    ValidationReason.MISSING_INTERPRETER: "Python interpreter not found in virtual environment: {path}",
}


class ValidationError(ForgeError):
    """Invalid or unsafe input detected before any process is started."""
    def __init__(self, reason: ValidationReason, path: Optional[str]):
        super().__init__(
            VALIDATION_MESSAGES[reason].format(path=path or "<none>"),
            code=INVALID_PARAMS,
            details={"reason": reason.value, "path": path}
        )
        self.reason = reason
        self.path = path


class ExecutionError(ForgeError):
    """Command sink creation or submission failed."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=INTERNAL_ERROR, details=details)
