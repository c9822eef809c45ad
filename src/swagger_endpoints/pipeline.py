"""Deploy pipeline: load -> prune -> select -> reconcile."""

import logging
from pathlib import Path

from swagger_endpoints.gateway.base import DeploymentMode, DeploymentTarget, ReconciliationResult
from swagger_endpoints.gateway.provider import GatewayProvider
from swagger_endpoints.gateway.reconcile import GatewayReconciler
from swagger_endpoints.parser.base import ApiDocument, PruneRecord, RouteSelection
from swagger_endpoints.parser.swagger import load_document
from swagger_endpoints.transform.prune import ConstraintPruner
from swagger_endpoints.transform.select import RouteSelector

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs each stage to completion before the next one starts.

    The first failing stage stops the run and its error reaches the caller
    as raised. Only the reconcile stage touches the gateway.
    """

    def __init__(self, provider: GatewayProvider):
        self.provider = provider

    def prepare(
        self,
        source_path: Path,
        selection: RouteSelection,
        target: DeploymentTarget,
        mode: DeploymentMode | str | None = None,
    ) -> tuple[ApiDocument, PruneRecord]:
        """Build the document that would be deployed, without deploying it."""
        DeploymentMode.coerce(mode)
        target.require_complete()

        document = load_document(source_path)
        document, record = ConstraintPruner(target.name).prune(document)
        if len(record):
            logger.info("Pruned %d unsupported element(s) from %s", len(record), source_path)
        document = RouteSelector().select(document, selection)
        return document, record

    def run(
        self,
        source_path: Path,
        selection: RouteSelection,
        target: DeploymentTarget,
        mode: DeploymentMode | str | None = None,
    ) -> ReconciliationResult:
        document, _ = self.prepare(source_path, selection, target, mode)
        return GatewayReconciler(self.provider).reconcile(document, target, mode)
