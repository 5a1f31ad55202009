"""Main pipeline: schema -> dependency order -> seed records."""

import time
from pathlib import Path
from typing import Callable, Optional, Union
from seedgraph.config.logging import get_logger
from seedgraph.config.settings import Settings, get_settings
from seedgraph.schema.loader import load_schema
from seedgraph.schema.models import SchemaIR
from seedgraph.store.base import PersistenceSession
from seedgraph.store.factory import open_session
from .error_logging import log_error
from .graph import build_dependency_graph
from .materializer import RecordMaterializer
from .ordering import topological_sort
from .report import SeedReport
from .self_relation import SelfRelationResolver
from .state import RunStateTable
from .synthesizer import ValueSynthesizer

logger = get_logger(__name__)


def seed_schema(schema: SchemaIR, session: PersistenceSession, settings: Settings) -> SeedReport:
    """
    Populate ``session`` with placeholder records for every entity of ``schema``.

    The session is left open; closing it is the caller's job.

    Args:
        schema: Entity schema
        session: Open persistence session
        settings: Application settings (max passes, ordering field, Faker options)

    Returns:
        SeedReport describing the run
    """
    start = time.time()

    graph = build_dependency_graph(schema.entities)
    ordering = topological_sort(graph)
    logger.info(f"Creation order: {', '.join(ordering.order)}")

    table = RunStateTable(schema)
    synthesizer = ValueSynthesizer(
        locale=settings.faker_locale,
        seed=settings.faker_seed,
        enums=schema.enum_values(),
    )
    materializer = RecordMaterializer(session, table, synthesizer, max_passes=settings.max_passes)

    logger.info("Starting record creation")
    passes = materializer.run(ordering.order)

    resolver = SelfRelationResolver(
        materializer,
        ordering_field=settings.ordering_field,
        ordering_offset_seconds=settings.ordering_offset_seconds,
    )
    outcomes = resolver.resolve_all()

    return SeedReport(
        order=ordering.order,
        cyclic=ordering.cyclic,
        passes=passes,
        max_passes=settings.max_passes,
        records=table.record_counts(),
        missing=table.missing(),
        self_relations=outcomes,
        deferred=materializer.deferred,
        elapsed_seconds=round(time.time() - start, 3),
    )


def generate_seed_data(
    schema_location: Union[str, Path],
    session: Optional[PersistenceSession] = None,
    settings: Optional[Settings] = None,
    on_seeded: Optional[Callable[[PersistenceSession, SeedReport], None]] = None,
) -> SeedReport:
    """
    Load a schema and seed a store with at least one record per entity type.

    The session is closed on every exit path, including when it was passed
    in by the caller. Schema errors and errors raised while closing the
    session propagate; failed record creations only show up in the report.

    Args:
        schema_location: Path to a ``schema.prisma`` or DMMF JSON file
        session: Store to populate; opened from settings when omitted
        settings: Application settings; the global settings when omitted
        on_seeded: Called with the session and report before the session is closed

    Returns:
        SeedReport describing the run

    Raises:
        SchemaLoadError: If the schema cannot be loaded
    """
    try:
        settings = settings or get_settings()
        logger.info(f"Reading schema from {schema_location}")
        schema = load_schema(schema_location)
        if session is None:
            session = open_session(settings, schema)

        report = seed_schema(schema, session, settings)
        if on_seeded is not None:
            on_seeded(session, report)
    except Exception as e:
        log_error(
            error=e,
            context={"schema": str(schema_location)},
            operation="seed generation",
        )
        raise
    finally:
        if session is not None:
            session.close()

    if report.complete:
        logger.info(f"Seed finished successfully in {report.elapsed_seconds:.3f}s")
    else:
        logger.warning(
            f"Seed finished with {len(report.missing)} empty entity type(s): "
            f"{', '.join(report.missing)}"
        )
    return report
