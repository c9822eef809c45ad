"""Models describing where and how a document is deployed."""

from enum import Enum
from typing import Any

from pydantic import BaseModel

from swagger_endpoints.errors import ConfigurationError


class DeploymentMode(str, Enum):
    """How an existing REST API absorbs the imported document."""

    MERGE = "merge"
    OVERWRITE = "overwrite"

    @classmethod
    def coerce(cls, value: "DeploymentMode | str | None") -> "DeploymentMode":
        if value is None:
            return cls.MERGE
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Unknown mode '{value}', expected 'merge' or 'overwrite'"
            ) from None


class ImportCommand(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class ReconcileAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


class DeploymentTarget(BaseModel):
    """Gateway resource name plus the stage/region it lives in."""

    name: str = ""
    stage: str = ""
    region: str = ""

    def require_complete(self) -> None:
        missing = [field for field in ("name", "stage", "region") if not getattr(self, field)]
        if missing:
            raise ConfigurationError("Deployment target is missing: " + ", ".join(missing))


class ResourceIdentity(BaseModel):
    id: str
    name: str


class ReconciliationResult(BaseModel):
    """Which branch the reconciler took and what the gateway answered."""

    action: ReconcileAction
    resource_id: str | None
    response: dict[str, Any]
