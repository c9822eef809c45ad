"""Detect the description format of a parsed document."""

from typing import Any

from swagger_endpoints.errors import SchemaValidationError


def detect_format(data: Any) -> str:
    """Detect whether a parsed document is Swagger 2.0 or OpenAPI 3.x.

    Returns: 'swagger' or 'openapi'.
    """
    if not isinstance(data, dict):
        raise SchemaValidationError(
            f"Document root must be a mapping, got {type(data).__name__}"
        )

    for key in ("openapi", "swagger"):
        if key in data and not isinstance(data[key], str):
            raise SchemaValidationError(
                f"'{key}' version must be a quoted string, got {data[key]!r}"
            )

    if "openapi" in data:
        if data["openapi"].startswith("3."):
            return "openapi"
        raise SchemaValidationError(f"Unsupported OpenAPI version '{data['openapi']}'")

    if "swagger" in data:
        if data["swagger"] == "2.0":
            return "swagger"
        raise SchemaValidationError(f"Unsupported Swagger version '{data['swagger']}'")

    raise SchemaValidationError("Document declares neither 'swagger' nor 'openapi'")
