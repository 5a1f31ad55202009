"""Utilities for loading entity schemas from Prisma datamodels or DMMF JSON."""

import json
from pathlib import Path
from typing import Any, Union
from pydantic import ValidationError
from seedgraph.config.logging import get_logger
from .errors import SchemaLoadError
from .models import SchemaIR
from .prisma_parser import parse_prisma_schema

logger = get_logger(__name__)


def _dmmf_to_schema(payload: Any) -> SchemaIR:
    """Accept either a full DMMF document or its bare ``datamodel`` section."""
    if not isinstance(payload, dict):
        raise SchemaLoadError(f"DMMF document must be a JSON object, got {type(payload).__name__}")
    datamodel = payload.get("datamodel", payload)
    if not isinstance(datamodel, dict) or "models" not in datamodel:
        raise SchemaLoadError("DMMF document has no 'models' list")
    return SchemaIR.model_validate(
        {
            "entities": datamodel["models"],
            "enums": [
                {"name": e["name"], "values": [v["name"] if isinstance(v, dict) else v for v in e.get("values", [])]}
                for e in datamodel.get("enums", [])
            ],
        }
    )


def load_schema(location: Union[str, Path]) -> SchemaIR:
    """
    Load an entity schema from a file.

    ``.json`` files are read as Prisma DMMF; anything else is parsed as a
    Prisma datamodel.

    Args:
        location: Path to the schema file

    Returns:
        Loaded SchemaIR

    Raises:
        SchemaLoadError: If the file is missing, empty or cannot be parsed
    """
    path = Path(location)
    if not path.exists():
        raise SchemaLoadError(f"Schema file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8").strip()
    except OSError as e:
        raise SchemaLoadError(f"Failed to read schema from {path}: {e}") from e
    if not content:
        raise SchemaLoadError(f"Schema file is empty: {path}")

    try:
        if path.suffix.lower() == ".json":
            schema = _dmmf_to_schema(json.loads(content))
        else:
            schema = parse_prisma_schema(content)
    except SchemaLoadError:
        raise
    except (json.JSONDecodeError, ValidationError, KeyError, TypeError, AttributeError) as e:
        raise SchemaLoadError(f"Failed to load schema from {path}: {e}") from e

    if not schema.entities:
        raise SchemaLoadError(f"Schema at {path} defines no entity types")

    logger.info(
        f"Loaded schema from {path}: {len(schema.entities)} entity type(s), "
        f"{len(schema.enums)} enum(s)"
    )
    return schema
