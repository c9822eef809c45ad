"""Error taxonomy for the deploy pipeline.

Callers can switch on the error class to decide whether a failure is worth
retrying. Only provider errors ever are.
"""

from typing import Any


class SwaggerEndpointsError(Exception):
    """Base class for every error raised by swagger-endpoints."""

    kind = "error"


class ConfigurationError(SwaggerEndpointsError):
    """Invalid mode, missing target fields or a broken project file."""

    kind = "configuration"


class ParseError(SwaggerEndpointsError):
    """The document could not be read or is not valid YAML/JSON."""

    kind = "parse"


class SchemaValidationError(SwaggerEndpointsError):
    """The document parsed but does not conform to its format's schema."""

    kind = "schema"

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = list(problems or [])
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class UnknownRouteError(SwaggerEndpointsError):
    """One or more requested routes are not in the document."""

    kind = "unknown-route"

    def __init__(self, routes: list[str]):
        self.routes = list(routes)
        super().__init__("Unknown route(s): " + ", ".join(self.routes))


class EmptySelectionError(SwaggerEndpointsError):
    """A non-"all" selection resolved to zero routes."""

    kind = "empty-selection"


class ProviderError(SwaggerEndpointsError):
    """The gateway provider failed to answer."""

    kind = "provider"

    def __init__(self, message: str, payload: dict[str, Any] | None = None):
        self.payload = payload or {}
        super().__init__(message)


class DeploymentRejectedError(ProviderError):
    """The gateway rejected the create/update call, warnings included."""

    kind = "rejected"
