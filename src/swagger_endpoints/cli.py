"""CLI entry point for swagger-endpoints."""

import logging
from pathlib import Path

import click

from swagger_endpoints.config import DEFAULT_SWAGGER_PATH, ProjectRegistry, find_project_path
from swagger_endpoints.errors import ConfigurationError, SwaggerEndpointsError
from swagger_endpoints.gateway.provider import ApiGatewayProvider
from swagger_endpoints.parser.base import RouteSelection
from swagger_endpoints.parser.swagger import load_document
from swagger_endpoints.pipeline import PipelineOrchestrator


def _project_root(project_root: Path | None, required: bool = True) -> Path:
    root = project_root or find_project_path()
    if root is None:
        if required:
            raise ConfigurationError("No project.yaml found in this directory or any parent")
        root = Path.cwd()
    return root


def _fail(exc: SwaggerEndpointsError) -> click.ClickException:
    return click.ClickException(f"[{exc.kind}] {exc}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Swagger Endpoints: deploy Swagger/OpenAPI documents to API Gateway."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


@main.command()
@click.argument("names", nargs=-1)
@click.option("-s", "--stage", envvar="SWAGGER_ENDPOINTS_STAGE", default=None, help="Optional if only one stage is defined in the project.")
@click.option("-r", "--region", envvar="SWAGGER_ENDPOINTS_REGION", default=None, help="Target region within the stage.")
@click.option("-a", "--all", "deploy_all", is_flag=True, help="Deploy every route in the document.")
@click.option("-w", "--swagger-path", type=click.Path(path_type=Path), default=DEFAULT_SWAGGER_PATH, help="Swagger file path (relative to project root).")
@click.option("-m", "--mode", default="merge", help="Import mode ('merge' or 'overwrite').")
@click.option("--name", default=None, help="REST API name, overriding the project settings.")
@click.option("--project-root", type=click.Path(file_okay=False, path_type=Path), default=None, help="Project directory holding project.yaml.")
@click.option("--dry-run", is_flag=True, help="Print the transformed document instead of deploying it.")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="With --dry-run, write the document to this file.")
def deploy(
    names: tuple[str, ...],
    stage: str | None,
    region: str | None,
    deploy_all: bool,
    swagger_path: Path,
    mode: str,
    name: str | None,
    project_root: Path | None,
    dry_run: bool,
    output: Path | None,
):
    """Deploy routes (<path>~<METHOD>, e.g. /users~GET) to API Gateway."""
    try:
        root = _project_root(project_root)
        registry = ProjectRegistry.load(root)
        target = registry.resolve_target(stage, region, name=name)
        selection = RouteSelection.all() if deploy_all else RouteSelection.of(names)
        source = root / swagger_path
        orchestrator = PipelineOrchestrator(ApiGatewayProvider(profiles=registry.profiles))

        click.echo(f"Deploying {source} as '{target.name}' to {target.stage} - {target.region}...", err=dry_run)
        if dry_run:
            document, record = orchestrator.prepare(source, selection, target, mode)
            click.echo(f"Pruned {len(record)} unsupported element(s).", err=True)
            body = document.serialize()
            if output:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(body, encoding="utf-8")
                click.echo(f"Document saved to {output}")
            else:
                click.echo(body)
            return

        result = orchestrator.run(source, selection, target, mode)
    except SwaggerEndpointsError as exc:
        raise _fail(exc) from exc

    click.echo(f"Done! REST API {result.resource_id} {result.action.value}.")


@main.command()
@click.option("-w", "--swagger-path", type=click.Path(path_type=Path), default=DEFAULT_SWAGGER_PATH, help="Swagger file path (relative to project root).")
@click.option("--project-root", type=click.Path(file_okay=False, path_type=Path), default=None, help="Project directory holding project.yaml.")
def routes(swagger_path: Path, project_root: Path | None):
    """List the route identifiers defined in a document."""
    try:
        document = load_document(_project_root(project_root, required=False) / swagger_path)
    except SwaggerEndpointsError as exc:
        raise _fail(exc) from exc

    for route in document.routes():
        click.echo(str(route))
