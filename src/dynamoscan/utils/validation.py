"""Validation of base58 identifiers before they reach the chain data source."""

import base58

from ..exceptions import InputValidationError

SIGNATURE_LENGTH = 64
PUBLIC_KEY_LENGTH = 32


def _decode_base58(value: str, what: str) -> bytes:
    if not isinstance(value, str) or not value:
        raise InputValidationError(f"{what} is required")
    try:
        return base58.b58decode(value)
    except ValueError as e:
        raise InputValidationError(f"Invalid {what}: {e}") from e


def validate_signature(signature: str) -> str:
    """Return the signature unchanged or raise ``InputValidationError``."""
    raw = _decode_base58(signature, "signature")
    if len(raw) != SIGNATURE_LENGTH:
        raise InputValidationError(
            f"Invalid signature: expected {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    return signature


def validate_public_key(public_key: str, what: str = "program id") -> str:
    """Return the public key unchanged or raise ``InputValidationError``."""
    raw = _decode_base58(public_key, what)
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InputValidationError(
            f"Invalid {what}: expected {PUBLIC_KEY_LENGTH} bytes, got {len(raw)}"
        )
    return public_key
