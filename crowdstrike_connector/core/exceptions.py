"""Custom exception classes for the connector."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class ConnectorException(Exception):
    """Base connector exception.

    All custom exceptions should inherit from this class.
    Follows RFC 7807 Problem Details so the HTTP surface can render it as-is.

    Attributes:
        type: Stable, externally visible error code.
        detail: Human-readable error message.
        title: Short, human-readable summary of the problem type.
        status_code: HTTP status code returned by the datasource, when one applies.
        extra: Additional context-specific information about the error.

    Example:
            raise ConnectorException(
            detail="Provided entity external ID is invalid.",
            type="unsupported-entity",
            title="Unsupported Entity",
            extra={"entity_external_id": "group"}
        )
    """

    default_type = "internal-error"
    default_title = "Internal Error"

    def __init__(
        self,
        detail: str,
        type: str | None = None,
        title: str | None = None,
        status_code: int | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize connector exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            status_code: Datasource HTTP status, if any.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.type = type or self.default_type
        self.title = title or self.default_title
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        """Serialize into a problem-details style mapping."""
        data: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
        }
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.extra:
            data.update(self.extra)
        return data


class DatasourceUnreachable(ConnectorException):
    """Raised when the transport to the datasource fails.

    Example:
            raise DatasourceUnreachable(
            detail="Failed to execute CrowdStrike request: connection refused.",
            extra={"url": "https://api.us-2.crowdstrike.com/..."}
        )
    """

    default_type = "datasource-unreachable"
    default_title = "Datasource Unreachable"


class DatasourceTimeout(DatasourceUnreachable):
    """Raised when the per-call deadline elapses before the datasource answers."""

    default_title = "Datasource Timeout"

    def __init__(
        self,
        timeout_seconds: float,
        detail: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        merged = {"timeout_seconds": timeout_seconds, **(extra or {})}
        super().__init__(
            detail=detail
            or (
                "Failed to execute CrowdStrike request: "
                f"request exceeded the configured timeout of {timeout_seconds:g} seconds."
            ),
            extra=merged,
        )
        self.timeout_seconds = timeout_seconds


class DatasourceRejected(ConnectorException):
    """Raised for 4xx/5xx responses without a structured vendor error payload.

    Example:
            raise DatasourceRejected(status_code=404)
    """

    default_type = "datasource-rejected"
    default_title = "Datasource Rejected Request"

    def __init__(
        self,
        status_code: int,
        retry_after: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(extra or {})
        if retry_after:
            merged["retry_after"] = retry_after
        super().__init__(
            detail=f"Datasource rejected request, returned status code: {status_code}.",
            status_code=status_code,
            extra=merged,
        )
        self.retry_after = retry_after


class DatasourceFailed(ConnectorException):
    """Raised when the datasource answers with its own error envelope.

    The vendor's codes and messages are carried verbatim, in order.

    Example:
            raise DatasourceFailed(
            errors=[(404, "404: Page Not Found")],
            status_code=200,
        )
    """

    default_type = "datasource-failed"
    default_title = "Datasource Failed"

    def __init__(
        self,
        errors: Sequence[tuple[int | None, str]],
        status_code: int | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.errors = [(code, message) for code, message in errors]
        lines = [f"Code: {code}, Message: {message}" for code, message in self.errors]
        merged = {
            "errors": [{"code": code, "message": message} for code, message in self.errors],
            **(extra or {}),
        }
        super().__init__(
            detail="Failed to query the datasource.\nGot errors: {}.".format("\n".join(lines)),
            status_code=status_code,
            extra=merged,
        )

    @property
    def code(self) -> int | None:
        """Code of the first vendor error."""
        return self.errors[0][0] if self.errors else None

    @property
    def message(self) -> str | None:
        """Message of the first vendor error."""
        return self.errors[0][1] if self.errors else None


class InvalidCursor(ConnectorException):
    """Raised when a cursor token is malformed or routed to the wrong entity.

    Example:
            raise InvalidCursor(detail="Expected a numeric cursor for entity: endpoint_protection_detect.")
    """

    default_type = "invalid-cursor"
    default_title = "Invalid Cursor"


class UnsupportedEntity(ConnectorException):
    """Raised for entity kinds that are not part of the entity table."""

    default_type = "unsupported-entity"
    default_title = "Unsupported Entity"

    def __init__(self, entity_external_id: str, detail: str | None = None) -> None:
        super().__init__(
            detail=detail or "Provided entity external ID is invalid.",
            extra={"entity_external_id": entity_external_id},
        )
        self.entity_external_id = entity_external_id


class InvalidConfiguration(ConnectorException):
    """Raised when a page request fails validation.

    The ``type`` distinguishes datasource config, entity config and page
    request problems.
    """

    default_type = "invalid-datasource-config"
    default_title = "Invalid Configuration"


class InvalidDatasourceConfig(InvalidConfiguration):
    default_type = "invalid-datasource-config"
    default_title = "Invalid Datasource Configuration"


class InvalidEntityConfig(InvalidConfiguration):
    default_type = "invalid-entity-config"
    default_title = "Invalid Entity Configuration"


class InvalidPageRequest(InvalidConfiguration):
    default_type = "invalid-page-request-config"
    default_title = "Invalid Page Request"


class MalformedResponse(ConnectorException):
    """Raised when a successful response cannot be parsed as the expected envelope."""

    default_type = "malformed-response"
    default_title = "Malformed Datasource Response"
