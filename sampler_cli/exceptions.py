"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SamplerCliError(Exception):
    """Base exception for all application-specific errors."""


class FileValidationError(SamplerCliError):
    """Raised when a candidate file is rejected before it can be selected."""


class UnsupportedFormatError(FileValidationError):
    """Raised when the file name does not carry the supported audio suffix."""


class FileTooLargeError(FileValidationError):
    """Raised when the file exceeds the upload size limit."""


class SubmissionError(SamplerCliError):
    """Raised when a submission cannot be started."""


class NoFileSelectedError(SubmissionError):
    """Raised when a submission is attempted before a file has been selected."""


class AlreadyInFlightError(SubmissionError):
    """Raised when a submission is attempted while another one is outstanding."""


class ServiceError(SamplerCliError):
    """Raised when the audio processing service reports or causes a failure."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class StructuredFailureError(ServiceError):
    """Raised when the service answers with a non-success status."""


class TransportFailureError(ServiceError):
    """Raised when no response could be obtained from the service at all."""


class ConfigurationError(SamplerCliError):
    """Raised for issues related to configuration loading or validation."""


class NoResultAvailableError(SamplerCliError):
    """Raised when a download is requested but no result is currently held."""
