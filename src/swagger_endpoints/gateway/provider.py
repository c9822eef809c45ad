"""Gateway provider: the AWS API Gateway control plane behind two calls."""

import logging
from typing import Any, Mapping, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from swagger_endpoints.errors import DeploymentRejectedError, ProviderError
from swagger_endpoints.gateway.base import DeploymentMode, ImportCommand, ResourceIdentity

logger = logging.getLogger(__name__)


class GatewayProvider(Protocol):
    def find_resource_by_name(self, name: str, stage: str, region: str) -> ResourceIdentity | None:
        ...

    def import_or_update(
        self,
        command: ImportCommand,
        body: str,
        *,
        stage: str,
        region: str,
        resource_id: str | None = None,
        mode: DeploymentMode | None = None,
        fail_on_warnings: bool = True,
    ) -> dict[str, Any]:
        ...


class ApiGatewayProvider:
    """REST API lookups and imports through boto3.

    Each stage may deploy with its own AWS profile; stages without one use
    the default credential chain.
    """

    def __init__(self, session: boto3.session.Session | None = None, profiles: Mapping[str, str] | None = None):
        self._session = session
        self._profiles = dict(profiles or {})
        self._sessions: dict[str, boto3.session.Session] = {}

    def _client(self, stage: str, region: str):
        if self._session is not None:
            session = self._session
        else:
            profile = self._profiles.get(stage)
            if profile not in self._sessions:
                self._sessions[profile] = boto3.session.Session(profile_name=profile)
            session = self._sessions[profile]
        return session.client("apigateway", region_name=region)

    def find_resource_by_name(self, name: str, stage: str, region: str) -> ResourceIdentity | None:
        client = self._client(stage, region)
        try:
            for page in client.get_paginator("get_rest_apis").paginate():
                for item in page.get("items", []):
                    if item.get("name") == name:
                        logger.debug("Found REST API %s (%s) in %s", name, item["id"], region)
                        return ResourceIdentity(id=item["id"], name=item["name"])
        except (ClientError, BotoCoreError) as exc:
            payload = exc.response if isinstance(exc, ClientError) else {}
            raise ProviderError(f"Could not list REST APIs in {region}: {exc}", payload) from exc
        return None

    def import_or_update(
        self,
        command: ImportCommand,
        body: str,
        *,
        stage: str,
        region: str,
        resource_id: str | None = None,
        mode: DeploymentMode | None = None,
        fail_on_warnings: bool = True,
    ) -> dict[str, Any]:
        client = self._client(stage, region)
        payload = body.encode("utf-8")
        try:
            if command is ImportCommand.CREATE:
                response = client.import_rest_api(failOnWarnings=fail_on_warnings, body=payload)
            else:
                response = client.put_rest_api(
                    restApiId=resource_id,
                    mode=DeploymentMode.coerce(mode).value,
                    failOnWarnings=fail_on_warnings,
                    body=payload,
                )
        except ClientError as exc:
            raise DeploymentRejectedError(
                f"API Gateway rejected {command.value} in {stage} - {region}: {exc}", exc.response
            ) from exc
        except BotoCoreError as exc:
            raise ProviderError(f"API Gateway {command.value} failed in {stage} - {region}: {exc}") from exc

        response = dict(response)
        response.pop("ResponseMetadata", None)
        return response
