"""Data models for a loaded API description.

The loader converts Swagger 2.0 and OpenAPI 3.x documents into an
ApiDocument, which keeps the raw sub-trees (operations, schemas) as plain
dicts so the transform stage can walk them generically.
"""

import copy
import json
from typing import Any, Iterator, NamedTuple

from pydantic import BaseModel, ConfigDict

from swagger_endpoints.errors import ConfigurationError

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Schema definitions live in "definitions" (2.0) or "components.schemas" (3.x);
# both are addressed through this section name.
SCHEMA_SECTION = "definitions"
SWAGGER2_SHARED_SECTIONS = ("parameters", "responses")


class ComponentRef(NamedTuple):
    """A reusable component addressed by a local ``$ref``."""

    section: str
    name: str


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def parse_component_ref(ref: str) -> ComponentRef | None:
    """Map ``#/definitions/X`` or ``#/components/<section>/X`` to a ComponentRef.

    References into a component (``#/definitions/X/properties/y``) count as a
    reference to the whole component. Anything else returns None.
    """
    if not ref.startswith("#/"):
        return None
    parts = [_unescape(p) for p in ref[2:].split("/")]
    if parts[0] == "components":
        if len(parts) < 3:
            return None
        section = SCHEMA_SECTION if parts[1] == "schemas" else parts[1]
        return ComponentRef(section, parts[2])
    if len(parts) < 2 or parts[0] == "paths":
        return None
    return ComponentRef(parts[0], parts[1])


class RouteKey(BaseModel):
    """A single route: resource path plus HTTP method."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: str  # upper-case, e.g. GET

    @classmethod
    def parse(cls, identifier: str) -> "RouteKey":
        """Parse ``<resourcePath>~<HTTP_METHOD>``, e.g. ``users/create~GET``."""
        path, sep, method = identifier.strip().rpartition("~")
        if not sep or not path or not method:
            raise ConfigurationError(
                f"Malformed route identifier '{identifier}', expected <path>~<METHOD>"
            )
        if not path.startswith("/"):
            path = "/" + path
        return cls(path=path, method=method.upper())

    def __str__(self) -> str:
        return f"{self.path}~{self.method}"


class RouteSelection(BaseModel):
    """Routes requested for deployment, or every route."""

    model_config = ConfigDict(frozen=True)

    deploy_all: bool = False
    routes: tuple[RouteKey, ...] = ()

    @classmethod
    def all(cls) -> "RouteSelection":
        return cls(deploy_all=True)

    @classmethod
    def of(cls, identifiers) -> "RouteSelection":
        routes: list[RouteKey] = []
        for identifier in identifiers:
            key = RouteKey.parse(identifier)
            if key not in routes:
                routes.append(key)
        return cls(routes=tuple(routes))


class PruneEntry(BaseModel):
    location: str  # JSON pointer
    reason: str


class PruneRecord(BaseModel):
    """Ordered log of every mutation the pruner applied."""

    entries: list[PruneEntry] = []

    def add(self, location: str, reason: str) -> None:
        self.entries.append(PruneEntry(location=location, reason=reason))

    def __len__(self) -> int:
        return len(self.entries)


class ApiDocument(BaseModel):
    """In-memory API description.

    ``info`` holds the info fields other than the title. ``shared`` holds the
    reusable sections other than schemas (2.0 ``parameters``/``responses``,
    3.x ``components.*``). ``extras`` holds every other top-level key.
    """

    version: str
    title: str
    info: dict[str, Any] = {}
    paths: dict[str, dict[str, Any]] = {}
    definitions: dict[str, Any] = {}
    shared: dict[str, Any] = {}
    extras: dict[str, Any] = {}

    @property
    def is_openapi3(self) -> bool:
        return self.version.startswith("3")

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ApiDocument":
        raw = copy.deepcopy(dict(raw))
        if "openapi" in raw:
            version = str(raw.pop("openapi"))
        else:
            version = str(raw.pop("swagger", ""))
        info = dict(raw.pop("info", None) or {})
        title = str(info.pop("title", ""))
        paths = raw.pop("paths", None) or {}

        if version.startswith("3"):
            shared = dict(raw.pop("components", None) or {})
            definitions = shared.pop("schemas", None) or {}
        else:
            definitions = raw.pop(SCHEMA_SECTION, None) or {}
            shared = {s: raw.pop(s) for s in SWAGGER2_SHARED_SECTIONS if s in raw}

        return cls(
            version=version,
            title=title,
            info=info,
            paths=paths,
            definitions=definitions,
            shared=shared,
            extras=raw,
        )

    def to_dict(self) -> dict[str, Any]:
        """Rebuild the raw document in its original layout (deep copy)."""
        version_key = "openapi" if self.is_openapi3 else "swagger"
        out: dict[str, Any] = {version_key: self.version, "info": {"title": self.title, **self.info}}
        out.update(self.extras)
        out["paths"] = self.paths

        if self.is_openapi3:
            components: dict[str, Any] = {}
            if self.definitions:
                components["schemas"] = self.definitions
            components.update(self.shared)
            if components:
                out["components"] = components
        else:
            if self.definitions:
                out[SCHEMA_SECTION] = self.definitions
            out.update(self.shared)

        return copy.deepcopy(out)

    def serialize(self) -> str:
        """Render the document as the JSON body sent to the gateway."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def routes(self) -> Iterator[RouteKey]:
        for path, item in self.paths.items():
            for key in item:
                if key.lower() in HTTP_METHODS:
                    yield RouteKey(path=path, method=key.upper())

    def operation_key(self, route: RouteKey) -> str | None:
        """Return the method key used in the document for ``route``, if present."""
        item = self.paths.get(route.path)
        if not item:
            return None
        for key in item:
            if key.lower() == route.method.lower() and key.lower() in HTTP_METHODS:
                return key
        return None

    def resolve(self, ref: ComponentRef) -> Any:
        if ref.section == SCHEMA_SECTION:
            return self.definitions.get(ref.name)
        section = self.shared.get(ref.section)
        return section.get(ref.name) if isinstance(section, dict) else None
