"""
Exception hierarchy for Dynamoscan.

This module defines all custom exceptions used throughout the codebase.
"""
from typing import Optional, Dict, Any


class DynamoScanError(Exception):
    """Base exception for all Dynamoscan-specific exceptions."""
    pass


class ConfigurationError(DynamoScanError):
    """Raised for configuration-related errors."""
    pass


class InputValidationError(DynamoScanError):
    """Raised when a signature or program id is malformed.

    Always raised before any upstream fetch is attempted.
    """
    pass


class UpstreamFetchError(DynamoScanError):
    """Raised when the chain data source fails to deliver a record."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        self.status = status
        self.response_data = response_data or {}
        super().__init__(message)


class APITimeoutError(UpstreamFetchError):
    """Raised when an API request times out."""
    pass


class APIConnectionError(UpstreamFetchError):
    """Raised when there's a connection error."""
    pass


class APIResponseError(UpstreamFetchError):
    """Raised when the API returns an error response."""

    def __init__(self, status: int, message: str, response_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"API request failed with status {status}: {message}",
            status=status,
            response_data=response_data,
        )


class NotExecutableError(DynamoScanError):
    """Raised when an audit is requested on an account that holds no program."""

    def __init__(self, program_id: str):
        self.program_id = program_id
        super().__init__(f"Account {program_id} is not executable")
