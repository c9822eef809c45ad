"""Project file discovery and the stage/region registry.

A project is a directory holding ``project.yaml``::

    name: proj-api
    stages:
      dev:
        profile: dev-profile          # optional AWS profile
        regions:
          us-east-1:
            apiGatewayApi: proj-dev   # optional REST API name override

Region entries are free-form variables; ``apiGatewayApi`` is the only one
read here.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from swagger_endpoints.errors import ConfigurationError
from swagger_endpoints.gateway.base import DeploymentTarget

PROJECT_FILES = ("project.yaml", "project.yml")
DEFAULT_SWAGGER_PATH = "swagger.yaml"
API_NAME_VARIABLE = "apiGatewayApi"


class StageConfig(BaseModel):
    profile: str | None = None
    regions: dict[str, dict[str, Any] | None] = {}


class ProjectConfig(BaseModel):
    name: str
    stages: dict[str, StageConfig] = {}


def find_project_path(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` to the first directory holding a project file."""
    current = Path(start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if any((directory / name).is_file() for name in PROJECT_FILES):
            return directory
    return None


class ProjectRegistry:
    """Resolves stages, regions and the gateway resource name of a project."""

    def __init__(self, config: ProjectConfig, root: Path):
        self.config = config
        self.root = root

    @classmethod
    def load(cls, root: Path) -> "ProjectRegistry":
        root = Path(root)
        for name in PROJECT_FILES:
            path = root / name
            if path.is_file():
                break
        else:
            raise ConfigurationError(f"No project file found in {root}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read project file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Project file {path} must be a mapping")

        try:
            config = ProjectConfig(**data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid project file {path}: {exc}") from exc
        return cls(config, root)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def profiles(self) -> dict[str, str]:
        return {stage: cfg.profile for stage, cfg in self.config.stages.items() if cfg.profile}

    def resolve_stage(self, stage: str | None) -> str:
        stages = self.config.stages
        if stage:
            if stage not in stages:
                raise ConfigurationError(f"Unknown stage '{stage}', project defines: {', '.join(stages) or 'none'}")
            return stage
        if len(stages) == 1:
            return next(iter(stages))
        raise ConfigurationError("Stage is required when the project defines more than one stage")

    def resolve_region(self, stage: str, region: str | None) -> str:
        regions = self.config.stages[stage].regions
        if region:
            if region not in regions:
                raise ConfigurationError(f"Stage '{stage}' has no region '{region}'")
            return region
        if len(regions) == 1:
            return next(iter(regions))
        raise ConfigurationError(f"Region is required for stage '{stage}'")

    def get_region(self, stage: str | None, region: str | None) -> dict[str, Any]:
        """Return the variables of a stage/region pair."""
        stage = self.resolve_stage(stage)
        region = self.resolve_region(stage, region)
        return dict(self.config.stages[stage].regions[region] or {})

    def resolve_target(self, stage: str | None, region: str | None, name: str | None = None) -> DeploymentTarget:
        stage = self.resolve_stage(stage)
        region = self.resolve_region(stage, region)
        variables = self.get_region(stage, region)
        return DeploymentTarget(
            name=name or variables.get(API_NAME_VARIABLE) or self.config.name,
            stage=stage,
            region=region,
        )
