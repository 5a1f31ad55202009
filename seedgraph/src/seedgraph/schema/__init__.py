"""Entity schema models and loaders."""

from .errors import SchemaLoadError
from .models import EntitySpec, EnumSpec, FieldSpec, SchemaIR
from .loader import load_schema
from .prisma_parser import parse_prisma_schema

__all__ = [
    "SchemaLoadError",
    "EntitySpec",
    "EnumSpec",
    "FieldSpec",
    "SchemaIR",
    "load_schema",
    "parse_prisma_schema",
]
