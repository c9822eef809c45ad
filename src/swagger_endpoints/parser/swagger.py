"""OpenAPI / Swagger document loader.

Parses Swagger 2.0 and OpenAPI 3.x documents into an ApiDocument, checking
every local reference and validating the result against the format schema.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from jsonschema.exceptions import ValidationError
from openapi_spec_validator import validate
from openapi_spec_validator.exceptions import OpenAPIError

from swagger_endpoints.errors import ParseError, SchemaValidationError
from swagger_endpoints.parser.base import ApiDocument
from swagger_endpoints.parser.detect import detect_format
from swagger_endpoints.transform.visitor import NodeKind, iter_nodes

logger = logging.getLogger(__name__)


def load_document(file_path: Path) -> ApiDocument:
    """Load, resolve and validate an API description file."""
    file_path = Path(file_path)
    raw = _normalize_keys(_parse_file(file_path))
    fmt = detect_format(raw)

    problems = _check_references(raw)
    if problems:
        raise SchemaValidationError("Unresolvable references", problems)

    try:
        validate(raw)
    except ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path)
        message = f"{exc.message} (at /{location})" if location else exc.message
        raise SchemaValidationError("Document failed validation", [message]) from exc
    except OpenAPIError as exc:
        raise SchemaValidationError("Document failed validation", [str(exc) or type(exc).__name__]) from exc

    document = ApiDocument.from_dict(raw)
    logger.debug(
        "Loaded %s %s definitions from %s (%d routes)",
        fmt, document.version, file_path, sum(1 for _ in document.routes()),
    )
    return document


def _parse_file(file_path: Path) -> Any:
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Cannot read {file_path}: {exc}") from exc

    if file_path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON in {file_path}: {exc}") from exc

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML in {file_path}: {exc}") from exc


def _normalize_keys(node: Any) -> Any:
    """Stringify mapping keys; YAML reads unquoted status codes as ints."""
    if isinstance(node, dict):
        return {str(k): _normalize_keys(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_normalize_keys(v) for v in node]
    return node


def _check_references(raw: dict) -> list[str]:
    problems = []
    for node in iter_nodes(raw):
        if node.kind is not NodeKind.REFERENCE:
            continue
        ref = node.value["$ref"]
        if not ref.startswith("#"):
            problems.append(f"external reference '{ref}' at {node.pointer or '/'}")
        elif not _pointer_exists(raw, ref):
            problems.append(f"dangling reference '{ref}' at {node.pointer or '/'}")
    return problems


def _pointer_exists(tree: Any, ref: str) -> bool:
    pointer = ref[1:]
    if not pointer:
        return True
    current = tree
    for token in pointer.lstrip("/").split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            return False
    return True
