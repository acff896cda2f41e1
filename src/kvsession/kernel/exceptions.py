"""Unified exception hierarchy for kvsession.

All package exceptions inherit from KvSessionException, enabling unified
error handling: catch KvSessionException to handle every session-store
error, or catch a specific subclass for targeted handling.

Categories:
- BusinessException: invalid session records and caller mistakes
- ConfigurationException: store misconfiguration detected at construction
- InfrastructureException: failures of the underlying key-value store
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class KvSessionException(Exception):
    """Base exception for all kvsession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "STORE_CALL_FAILED").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(KvSessionException):
    """Caller-side errors: invalid input or session records."""


class ValidationException(BusinessException):
    """A session record or argument failed validation."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(KvSessionException):
    """The store was constructed with a missing or unsupported setting."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(KvSessionException):
    """Failures of the external key-value store."""


class StoreCallException(InfrastructureException):
    """A command issued to the key-value store failed.

    The client's original exception is preserved as ``__cause__``.
    """


class PartialWriteException(StoreCallException):
    """The first command of a primary/index key pair succeeded, the second failed.

    The first write is left in place; ``context`` names both keys so the
    divergence can be repaired.
    """


class RecordDecodeException(StoreCallException):
    """A stored session payload could not be decoded by the serializer."""
