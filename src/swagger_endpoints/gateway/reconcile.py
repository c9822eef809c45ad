"""Create-or-update decision against the gateway."""

import logging

from swagger_endpoints.gateway.base import (
    DeploymentMode,
    DeploymentTarget,
    ImportCommand,
    ReconcileAction,
    ReconciliationResult,
)
from swagger_endpoints.gateway.provider import GatewayProvider
from swagger_endpoints.parser.base import ApiDocument

logger = logging.getLogger(__name__)


class GatewayReconciler:
    """Imports a document as a new REST API or puts it onto the existing one.

    The existence lookup and the import run strictly in sequence. Nothing
    guards against another caller creating the same API in between.
    """

    def __init__(self, provider: GatewayProvider):
        self.provider = provider

    def reconcile(
        self,
        document: ApiDocument,
        target: DeploymentTarget,
        mode: DeploymentMode | str | None = None,
    ) -> ReconciliationResult:
        mode = DeploymentMode.coerce(mode)
        target.require_complete()

        existing = self.provider.find_resource_by_name(target.name, target.stage, target.region)
        body = document.serialize()

        if existing is not None:
            logger.info(
                "Updating REST API %s (%s) in %s - %s, mode %s",
                target.name, existing.id, target.stage, target.region, mode.value,
            )
            response = self.provider.import_or_update(
                ImportCommand.UPDATE,
                body,
                stage=target.stage,
                region=target.region,
                resource_id=existing.id,
                mode=mode,
                fail_on_warnings=True,
            )
            return ReconciliationResult(action=ReconcileAction.UPDATED, resource_id=existing.id, response=response)

        logger.info("Creating REST API %s in %s - %s", target.name, target.stage, target.region)
        response = self.provider.import_or_update(
            ImportCommand.CREATE,
            body,
            stage=target.stage,
            region=target.region,
            fail_on_warnings=True,
        )
        resource_id = response.get("id")
        logger.debug("%s - %s: created a new REST API %s", target.stage, target.region, resource_id)
        return ReconciliationResult(action=ReconcileAction.CREATED, resource_id=resource_id, response=response)
