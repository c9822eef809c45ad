"""Narrows a document down to a selection of routes."""

import copy
import logging
from typing import Any, Iterable

from swagger_endpoints.errors import EmptySelectionError, UnknownRouteError
from swagger_endpoints.parser.base import HTTP_METHODS, SCHEMA_SECTION, ApiDocument, ComponentRef, RouteSelection
from swagger_endpoints.transform.visitor import collect_refs

logger = logging.getLogger(__name__)

# Reusable sections addressed by name rather than by $ref.
UNREFERENCED_SECTIONS = {"securitySchemes"}


class RouteSelector:
    """Builds a document holding only the selected routes.

    Schema definitions and other reusable components are limited to the
    transitive closure of what the kept operations reference.
    """

    def select(self, document: ApiDocument, selection: RouteSelection) -> ApiDocument:
        if selection.deploy_all:
            return document
        if not selection.routes:
            raise EmptySelectionError("No routes selected; pass route names or deploy all routes")

        missing = [str(r) for r in selection.routes if document.operation_key(r) is None]
        if missing:
            raise UnknownRouteError(missing)

        paths: dict[str, dict[str, Any]] = {}
        for route in selection.routes:
            method_key = document.operation_key(route)
            item = document.paths[route.path]
            if route.path not in paths:
                # Path-level keys (parameters, summary, ...) apply to every kept method
                paths[route.path] = {k: v for k, v in item.items() if k.lower() not in HTTP_METHODS}
            paths[route.path][method_key] = item[method_key]

        # Extensions and name-addressed sections are kept whole
        whole = {
            section: entries for section, entries in document.shared.items()
            if section in UNREFERENCED_SECTIONS or section.startswith("x-") or not isinstance(entries, dict)
        }
        # Everything kept verbatim can hold references too
        closure = self.reference_closure(document, [paths, document.extras, whole])
        definitions = {
            name: schema for name, schema in document.definitions.items()
            if ComponentRef(SCHEMA_SECTION, name) in closure
        }
        shared = {}
        for section, entries in document.shared.items():
            if section in whole:
                shared[section] = entries
                continue
            kept = {name: value for name, value in entries.items() if ComponentRef(section, name) in closure}
            if kept:
                shared[section] = kept

        logger.debug(
            "Selected %d route(s) with %d of %d definition(s)",
            len(selection.routes), len(definitions), len(document.definitions),
        )
        return document.model_copy(
            update={
                "paths": copy.deepcopy(paths),
                "definitions": copy.deepcopy(definitions),
                "shared": copy.deepcopy(shared),
            },
            deep=True,
        )

    def reference_closure(self, document: ApiDocument, roots: Iterable[Any]) -> set[ComponentRef]:
        """Depth-first walk of the component graph starting from ``roots``."""
        stack: list[ComponentRef] = []
        for root in roots:
            stack.extend(collect_refs(root))

        seen: set[ComponentRef] = set()
        while stack:
            ref = stack.pop()
            if ref in seen:
                continue
            seen.add(ref)
            target = document.resolve(ref)
            if target is not None:
                stack.extend(collect_refs(target))
        return seen
