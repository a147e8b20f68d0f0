"""Custom exceptions for InfoRanker application.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from InfoRankerError for easy catching.

Collection failures are not modeled as an exception hierarchy. A single
CollectionError carries a CollectionFailure value whose severity tag decides
how far the failure escalates (see decide_escalation).
"""

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class InfoRankerError(Exception):
    """Base exception for all InfoRanker errors.

    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise InfoRankerError("Something went wrong", context={"keyword_id": "123"})
        ... except InfoRankerError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize InfoRankerError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "InfoRankerError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Database Errors
# ============================================


class DatabaseError(InfoRankerError):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize DatabaseError.

        Args:
            message: Error message
            context: Additional context
            operation: Database operation that failed (e.g., "insert", "update")
        """
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)


class RecordNotFoundError(DatabaseError):
    """Raised when a database record is not found.

    Attributes:
        model: The model class that was queried
        record_id: The ID that was not found
    """

    def __init__(
        self,
        model: str,
        record_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RecordNotFoundError.

        Args:
            model: Name of the model class
            record_id: ID that was not found
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"model": model, "record_id": record_id})
        super().__init__(f"{model} with id={record_id} not found", context=ctx)
        self.model = model
        self.record_id = record_id


# ============================================
# Configuration Errors
# ============================================


class ConfigError(InfoRankerError):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails.

    Attributes:
        field: Field that failed validation (optional)
        value: Invalid value (optional)
        reason: Validation failure reason (optional)
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        reason: str | None = None,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}

        self.field = field
        self.value = value
        self.reason = reason

        if field and reason:
            ctx.update({"field": field, "reason": reason})
            if value is not None:
                ctx["value"] = str(value)
            final_message = f"Config validation failed for '{field}': {reason}"
        elif message:
            final_message = message
        else:
            final_message = "Configuration validation failed"

        super().__init__(final_message, config_path=config_path, context=ctx)


class ConfigNotFoundError(ConfigError):
    """Raised when a required configuration file is not found."""

    def __init__(
        self,
        config_key: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["config_key"] = config_key
        super().__init__(
            f"Configuration '{config_key}' not found",
            config_path=config_path,
            context=ctx,
        )
        self.config_key = config_key


# ============================================
# Service Errors
# ============================================


class ServiceError(InfoRankerError):
    """Base exception for service-related errors."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ServiceError.

        Args:
            message: Error message
            service_name: Name of the service
            context: Additional context
        """
        ctx = context or {}
        if service_name:
            ctx["service_name"] = service_name
        super().__init__(message, context=ctx)


class ExternalAPIError(ServiceError):
    """Raised when an external API call fails.

    Attributes:
        service: Name of the external service
        status_code: HTTP status code (if applicable)
        endpoint: API endpoint that was called
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        endpoint: str | None = None,
        response_body: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ExternalAPIError.

        Args:
            service: Name of the external service
            message: Error message
            status_code: HTTP status code (optional)
            endpoint: API endpoint (optional)
            response_body: Response body for debugging (optional)
            context: Additional context
        """
        ctx = context or {}
        ctx["service"] = service
        if status_code is not None:
            ctx["status_code"] = status_code
        if endpoint:
            ctx["endpoint"] = endpoint
        if response_body:
            ctx["response_body"] = response_body[:500]

        self.service = service
        self.status_code = status_code
        self.endpoint = endpoint

        super().__init__(f"{service} API error: {message}", service_name=service, context=ctx)


class LLMError(ServiceError):
    """Raised when an LLM completion fails or returns unusable output.

    Attributes:
        model: Model that was called
    """

    def __init__(
        self,
        message: str,
        model: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if model:
            ctx["model"] = model
        self.model = model
        super().__init__(message, service_name="llm", context=ctx)


# ============================================
# Collection Errors
# ============================================


class ErrorSeverity(str, enum.Enum):
    """Blast radius of a collection failure."""

    WARNING = "warning"  # single article
    ERROR = "error"  # single source
    CRITICAL = "critical"  # whole job


class EscalationAction(str, enum.Enum):
    """What the orchestrator does with a failure."""

    SKIP_ARTICLE = "skip_article"
    SKIP_SOURCE = "skip_source"
    ABORT_JOB = "abort_job"


class CollectionFailure(BaseModel):
    """Severity-tagged failure raised or recorded during a collection run.

    Attributes:
        severity: Failure severity
        message: Human-readable message
        source_name: Source being processed, if any
        article_url: Article concerned, for warnings
        article_title: Article title, for warnings
    """

    model_config = ConfigDict(frozen=True)

    severity: ErrorSeverity
    message: str
    source_name: str | None = None
    article_url: str | None = None
    article_title: str | None = None

    @classmethod
    def warning(
        cls,
        message: str,
        source_name: str | None = None,
        article_url: str | None = None,
        article_title: str | None = None,
    ) -> "CollectionFailure":
        return cls(
            severity=ErrorSeverity.WARNING,
            message=message,
            source_name=source_name,
            article_url=article_url,
            article_title=article_title,
        )

    @classmethod
    def error(cls, message: str, source_name: str | None = None) -> "CollectionFailure":
        return cls(severity=ErrorSeverity.ERROR, message=message, source_name=source_name)

    @classmethod
    def critical(cls, message: str, source_name: str | None = None) -> "CollectionFailure":
        return cls(severity=ErrorSeverity.CRITICAL, message=message, source_name=source_name)

    @property
    def is_fatal(self) -> bool:
        return self.severity == ErrorSeverity.CRITICAL


class CollectionError(InfoRankerError):
    """Raised to carry a CollectionFailure out of a pipeline stage.

    Attributes:
        failure: The tagged failure
    """

    def __init__(self, failure: CollectionFailure) -> None:
        """Initialize CollectionError.

        Args:
            failure: Severity-tagged failure
        """
        ctx: dict[str, Any] = {"severity": failure.severity.value}
        if failure.source_name:
            ctx["source_name"] = failure.source_name
        if failure.article_url:
            ctx["article_url"] = failure.article_url
        self.failure = failure
        super().__init__(failure.message, context=ctx)

    @property
    def severity(self) -> ErrorSeverity:
        return self.failure.severity


def decide_escalation(failure: CollectionFailure) -> EscalationAction:
    """Map a failure's severity to the orchestrator's reaction.

    Args:
        failure: Tagged failure

    Returns:
        Action to take
    """
    if failure.severity == ErrorSeverity.CRITICAL:
        return EscalationAction.ABORT_JOB
    if failure.severity == ErrorSeverity.ERROR:
        return EscalationAction.SKIP_SOURCE
    return EscalationAction.SKIP_ARTICLE


__all__ = [
    "InfoRankerError",
    "DatabaseError",
    "RecordNotFoundError",
    "ConfigError",
    "ConfigValidationError",
    "ConfigNotFoundError",
    "ServiceError",
    "ExternalAPIError",
    "LLMError",
    "ErrorSeverity",
    "EscalationAction",
    "CollectionFailure",
    "CollectionError",
    "decide_escalation",
]
