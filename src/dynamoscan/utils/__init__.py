"""
Dynamoscan Utils Package

- Logging: Structured logging with JSON support
- Async HTTP Client: For JSON-RPC requests
- Error Handling: Error translation and retry decorators
- Validation: base58 signature and public key checks
"""

from ..exceptions import (
    DynamoScanError,
    ConfigurationError,
    InputValidationError,
    UpstreamFetchError,
    APITimeoutError,
    APIConnectionError,
    APIResponseError,
    NotExecutableError,
)
from .logger import logger, get_logger, setup_logger
from .async_client import AsyncAPIClient
from .error_handling import async_handle_errors, async_retry_on_failure
from .validation import validate_signature, validate_public_key

__all__ = [
    # Logging
    'logger',
    'get_logger',
    'setup_logger',

    # Async HTTP Client
    'AsyncAPIClient',

    # Error Handling
    'async_handle_errors',
    'async_retry_on_failure',

    # Validation
    'validate_signature',
    'validate_public_key',

    # Exceptions
    'DynamoScanError',
    'ConfigurationError',
    'InputValidationError',
    'UpstreamFetchError',
    'APITimeoutError',
    'APIConnectionError',
    'APIResponseError',
    'NotExecutableError',
]
