"""CLI entry point for resource-registry."""

import json
import logging
from pathlib import Path

import click
import yaml

from resource_registry.config import DOCUMENT_KINDS, RegistrySettings, load_config
from resource_registry.errors import InputRootError
from resource_registry.generator.overrides import load_display_name_overrides, load_scope_overrides
from resource_registry.generator.registry import REGISTRY_JSON, Registry, build_registry
from resource_registry.generator.schema import SchemaGenerator
from resource_registry.generator.validator import validate_artifacts
from resource_registry.parser.base import OPERATIONS
from resource_registry.parser.documents import load_documents
from resource_registry.validation import validate_resource_payload


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _registry_path(registry_path: Path | None, config: RegistrySettings) -> Path:
    path = registry_path or config.output_dir / REGISTRY_JSON
    if not path.exists():
        raise click.ClickException(f"Registry not found: {path}. Run `resource-registry build` first.")
    return path


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path), help="Path to config file.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None):
    """Resource Registry: derive resource types, schemas and validation from API specs."""
    ctx.ensure_object(dict)
    config = load_config(config_path)
    if verbose:
        config.verbose = True
    ctx.obj["config"] = config
    setup_logging(config.verbose)


@main.command()
@click.argument("doc_dir", required=False, type=click.Path(path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output directory for the generated registry.")
@click.option("--kind", type=click.Choice(DOCUMENT_KINDS), default=None, help="Document kind.")
@click.option("--scope-overrides", type=click.Path(path_type=Path), default=None, help="Namespace scope overrides JSON.")
@click.option("--display-name-overrides", type=click.Path(path_type=Path), default=None, help="Display name overrides JSON.")
@click.option("--strict/--no-strict", default=None, help="Skip domain files without a domain tag.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Parallel document readers.")
@click.pass_context
def build(ctx: click.Context, doc_dir, output, kind, scope_overrides, display_name_overrides, strict, workers):
    """Build the resource registry from a directory of spec documents."""
    config: RegistrySettings = ctx.obj["config"]
    doc_dir = doc_dir or config.spec_dir
    output = output or config.output_dir
    kind = kind or config.document_kind

    click.echo(f"Reading {doc_dir} (kind: {kind})...")
    try:
        documents = load_documents(
            doc_dir,
            kind=kind,
            strict=config.strict_domains if strict is None else strict,
            max_workers=workers or config.max_workers,
        )
    except InputRootError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Loaded {len(documents)} documents.")

    registry = build_registry(
        documents,
        scope_overrides=load_scope_overrides(scope_overrides or config.scope_overrides),
        display_name_overrides=load_display_name_overrides(
            display_name_overrides or config.display_name_overrides
        ),
    )

    for file_path in registry.write(output).values():
        click.echo(f"  Created {file_path}")
    click.echo(f"Generated {len(registry)} resource types in {output}")


@main.command()
@click.option("-r", "--registry", "registry_path", type=click.Path(path_type=Path), default=None, help="Registry JSON snapshot.")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output directory for schemas.")
@click.pass_context
def schema(ctx: click.Context, registry_path, output):
    """Generate JSON Schemas for every resource type in a registry."""
    config: RegistrySettings = ctx.obj["config"]
    registry = Registry.load(_registry_path(registry_path, config))
    output = output or config.schema_dir

    written = SchemaGenerator(registry).write(output)
    click.echo(f"Generated {len(written)} schemas in {output}")


@main.command()
@click.argument("resource_key")
@click.argument("payload_path", type=click.Path(exists=True, path_type=Path))
@click.option("--operation", default="create", type=click.Choice(OPERATIONS), help="Operation to validate for.")
@click.option("-r", "--registry", "registry_path", type=click.Path(path_type=Path), default=None, help="Registry JSON snapshot.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def validate(ctx: click.Context, resource_key, payload_path, operation, registry_path, as_json):
    """Validate a JSON or YAML payload before sending it to the API."""
    config: RegistrySettings = ctx.obj["config"]
    registry = Registry.load(_registry_path(registry_path, config))

    try:
        payload = yaml.safe_load(payload_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise click.ClickException(f"Cannot parse payload {payload_path}: {e}") from e
    if not isinstance(payload, dict):
        raise click.ClickException(f"Payload {payload_path} must be an object")

    result = validate_resource_payload(registry, resource_key, operation, payload)

    if as_json:
        click.echo(json.dumps(result.model_dump(exclude_none=True), indent=2, ensure_ascii=False))
    else:
        click.echo("Valid." if result.valid else "Invalid.")
        for warning in result.warnings:
            click.echo(f"Warning: {warning}")
        for hint in result.hints:
            click.echo(f"Hint: {hint}")

    ctx.exit(0 if result.valid else 1)


@main.command()
@click.argument("output_dir", required=False, type=click.Path(path_type=Path))
@click.pass_context
def check(ctx: click.Context, output_dir):
    """Check generated registry artifacts for structural problems."""
    config: RegistrySettings = ctx.obj["config"]
    output_dir = output_dir or config.output_dir

    errors = validate_artifacts(output_dir)
    if not errors:
        click.echo(f"All generated files in {output_dir} are valid.")
        return

    for filename, problems in errors.items():
        click.echo(f"{filename}:")
        for problem in problems:
            click.echo(f"  {problem}")
    ctx.exit(1)
