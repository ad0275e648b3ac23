"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
            return JSONResponse(
            status_code=502,
            content=ProblemDetails(
                type="datasource-rejected",
                title="Datasource Rejected Request",
                status=502,
                detail="Datasource rejected request, returned status code: 404.",
                instance="/api/v1/pages"
            ).model_dump()
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="Identifier of the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=500,
        description="URI reference identifying the specific occurrence",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "invalid-cursor",
                "title": "Invalid Cursor",
                "status": 400,
                "detail": "Cursor must be a non-negative integer.",
                "instance": "/api/v1/pages",
            }
        },
        str_strip_whitespace=True,
    )
