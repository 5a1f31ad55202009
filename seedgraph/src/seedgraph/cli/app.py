"""Typer CLI application."""

from pathlib import Path
from typing import Optional
import typer
from pydantic import ValidationError

from seedgraph.config.logging import setup_logging
from seedgraph.config.settings import Settings, get_settings
from seedgraph.generation.graph import build_dependency_graph
from seedgraph.generation.ordering import topological_sort
from seedgraph.generation.pipeline import generate_seed_data
from seedgraph.generation.writer import export_tables, report_frame, write_csv
from seedgraph.schema.errors import SchemaLoadError
from seedgraph.schema.loader import load_schema

app = typer.Typer(help="seedgraph: placeholder records for every entity of a relational schema")


def _load_or_exit(schema_file: Path):
    try:
        return load_schema(schema_file)
    except SchemaLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def seed(
    schema_file: Path,
    backend: Optional[str] = typer.Option(None, "--backend", help="Store backend: memory or duckdb"),
    database: Optional[Path] = typer.Option(None, "--database", help="DuckDB database file"),
    max_passes: Optional[int] = typer.Option(None, "--max-passes", help="Maximum creation passes"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the run summary to this CSV file"),
    export_dir: Optional[Path] = typer.Option(None, "--export-dir", help="Export every seeded table as CSV"),
):
    """
    Create at least one record for every entity type of a schema.

    Args:
        schema_file: Path to schema.prisma or a DMMF JSON file
    """
    overrides = {
        "store_backend": backend,
        "database_path": database,
        "max_passes": max_passes,
        "export_dir": export_dir,
    }
    try:
        settings = Settings(
            **{
                **get_settings().model_dump(),
                **{k: v for k, v in overrides.items() if v is not None},
            }
        )
    except ValidationError as e:
        typer.echo(f"Error: invalid settings: {e}", err=True)
        raise typer.Exit(1)
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    def export(session, _report):
        if settings.export_dir is not None:
            written = export_tables(session.frames(), settings.export_dir)
            typer.echo(f"Exported {len(written)} table(s) to {settings.export_dir}")

    typer.echo(f"Seeding from {schema_file} ({settings.store_backend} store)")
    try:
        result = generate_seed_data(schema_file, settings=settings, on_seeded=export)
    except SchemaLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if report is not None:
        write_csv(report_frame(result), report)
        typer.echo(f"Run summary written to {report}")

    total = sum(result.records.values())
    typer.echo(
        f"Created {total} record(s) across {len(result.records) - len(result.missing)}"
        f"/{len(result.records)} entity type(s) in {result.passes} pass(es)"
    )
    if result.complete:
        typer.echo("✓ Seed finished successfully!")
    else:
        typer.echo(f"Entity types left empty: {', '.join(result.missing)}")


@app.command()
def order(schema_file: Path):
    """
    Print the creation order of a schema's entity types.

    Args:
        schema_file: Path to schema.prisma or a DMMF JSON file
    """
    schema = _load_or_exit(schema_file)
    result = topological_sort(build_dependency_graph(schema.entities))
    for idx, name in enumerate(result.order, 1):
        typer.echo(f"{idx:>3}. {name}")
    if result.has_cycle:
        typer.echo(f"Dependency cycle among: {', '.join(result.cyclic)}")


@app.command()
def inspect(schema_file: Path):
    """
    List entity types with their dependencies and self relations.

    Args:
        schema_file: Path to schema.prisma or a DMMF JSON file
    """
    schema = _load_or_exit(schema_file)
    graph = build_dependency_graph(schema.entities)
    for entity in schema.entities:
        node = graph[entity.name]
        typer.echo(entity.name)
        typer.echo(f"  depends on: {', '.join(sorted(node.depends_on)) or '-'}")
        typer.echo(f"  referenced by: {', '.join(sorted(node.referenced_by)) or '-'}")
        if entity.has_self_relation():
            names = ", ".join(f.name for f in entity.self_relation_fields())
            typer.echo(f"  self relation: {names}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
