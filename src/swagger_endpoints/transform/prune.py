"""Removes constructs API Gateway cannot import."""

import logging

from swagger_endpoints.parser.base import ApiDocument, PruneRecord
from swagger_endpoints.transform.visitor import DocumentNode, NodeVisitor

logger = logging.getLogger(__name__)


class ConstraintPruner(NodeVisitor):
    """Normalizes a document for API Gateway and records every change.

    The rules are:

    - the title is forced to the gateway resource name,
    - ``responses.default`` is dropped from every operation,
    - ``additionalProperties: true`` (or ``{}``) is dropped from object schemas.

    Routes and operations are never removed. Pruning an already pruned
    document is a no-op.
    """

    def __init__(self, resource_name: str):
        self.resource_name = resource_name
        self._record = PruneRecord()

    def prune(self, document: ApiDocument) -> tuple[ApiDocument, PruneRecord]:
        self._record = PruneRecord()
        raw = document.to_dict()

        title = raw["info"].get("title")
        if self.resource_name and title != self.resource_name:
            logger.info(
                "Swagger API title '%s' does not match resource name '%s', forcing '%s'",
                title, self.resource_name, self.resource_name,
            )
            raw["info"]["title"] = self.resource_name
            self._record.add("/info/title", f"title '{title}' replaced by '{self.resource_name}'")

        self.visit(raw)
        return ApiDocument.from_dict(raw), self._record

    def visit_responses(self, node: DocumentNode) -> None:
        if "default" in node.value:
            del node.value["default"]
            self._remove(node, "default", "responses.default is not supported by API Gateway")

    def visit_object_schema(self, node: DocumentNode) -> None:
        extra = node.value.get("additionalProperties")
        if extra is True or extra == {}:
            del node.value["additionalProperties"]
            self._remove(node, "additionalProperties", "free-form objects are not supported by API Gateway")

    def _remove(self, node: DocumentNode, key: str, reason: str) -> None:
        location = f"{node.pointer}/{key}"
        logger.info("Prune %s - %s", location, reason)
        self._record.add(location, reason)
