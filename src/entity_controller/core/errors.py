"""
Structured error types for entity-controller.

Every failure raised by a controller or by the shipped DAO is a
:class:`ControllerError` carrying a category, a structured context and
an optional chained cause.  Controllers themselves never catch anything:
whatever the DAO raises reaches the caller unchanged.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure kind
    - **Rich Context:** Errors carry the entity and operation involved
    - **Error Chaining:** Driver exceptions are kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     ControllerError                          │
        │          (category, context, cause)                          │
        ├─────────────────────────────────────────────────────────────┤
        │  ConfigError          ValidationError       PersistenceError │
        │  (CONFIG)             (VALIDATION)          (PERSISTENCE)    │
        │      │                    │                                  │
        │  MissingDAOError     InvalidPaginationError                  │
        │                      InvalidSortCriterionError               │
        │                                                              │
        │  EntityNotFoundError (NOT_FOUND)                             │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = EntityNotFoundError("User 42 not found")
    >>> error.with_context(entity="User", entity_id=42).context.entity_id
    42
    >>> error.to_dict()["category"]
    'NOT_FOUND'

Tags:
    error-handling, exception-hierarchy, error-context, entity-controller
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for classification and logging."""

    CONFIG = "CONFIG"                # Controller wiring, settings
    VALIDATION = "VALIDATION"        # Bad paging or sort arguments
    NOT_FOUND = "NOT_FOUND"          # Entity lookup by id failed
    PERSISTENCE = "PERSISTENCE"      # Session / driver failures
    INTERNAL = "INTERNAL"            # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        entity: Name of the entity class involved
        operation: DAO/controller operation name (``save``, ``find_by_id`` ...)
        entity_id: Primary key value, when known
        metadata: Additional key-value pairs
    """

    entity: str | None = None
    operation: str | None = None
    entity_id: Any = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["entity", "operation", "entity_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ControllerError(Exception):
    """
    Base exception for every entity-controller error.

    Subclasses set ``default_category`` so callers rarely pass one.

    Examples:
        >>> error = ControllerError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> try:
        ...     raise RuntimeError("disk I/O error")
        ... except RuntimeError as e:
        ...     error = PersistenceError("save failed", cause=e)
        >>> error.cause
        RuntimeError('disk I/O error')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ControllerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise EntityNotFoundError("missing").with_context(
                entity="User",
                entity_id=42,
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ControllerError):
    """Controller wiring or settings are invalid."""

    default_category = ErrorCategory.CONFIG


class MissingDAOError(ConfigError, ValueError):
    """A controller was constructed without a DAO."""

    def __init__(self, message: str = "dao cannot be None"):
        super().__init__(message)


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ControllerError):
    """Arguments passed to a DAO operation are invalid."""

    default_category = ErrorCategory.VALIDATION


class InvalidPaginationError(ValidationError):
    """``first_result`` or ``max_results`` is negative."""

    def __init__(self, first_result: int | None, max_results: int | None):
        super().__init__(
            f"Invalid page: first_result={first_result!r}, max_results={max_results!r}"
        )
        self.first_result = first_result
        self.max_results = max_results


class InvalidSortCriterionError(ValidationError):
    """A sort criterion names a property the entity does not map."""

    def __init__(self, property_name: str, message: str | None = None):
        super().__init__(message or f"Cannot sort by unknown property: {property_name!r}")
        self.property_name = property_name


# =============================================================================
# LOOKUP / PERSISTENCE ERRORS
# =============================================================================


class EntityNotFoundError(ControllerError):
    """No entity exists with the requested primary key."""

    default_category = ErrorCategory.NOT_FOUND


class PersistenceError(ControllerError):
    """The persistence session or driver failed."""

    default_category = ErrorCategory.PERSISTENCE


def categorize_error(error: Exception) -> ErrorCategory:
    """Return the category of an error, INTERNAL for foreign exceptions."""
    if isinstance(error, ControllerError):
        return error.category
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ControllerError",
    "ConfigError",
    "MissingDAOError",
    "ValidationError",
    "InvalidPaginationError",
    "InvalidSortCriterionError",
    "EntityNotFoundError",
    "PersistenceError",
    "categorize_error",
]
