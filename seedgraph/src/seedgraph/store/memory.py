"""In-process store that enforces the constraints of an entity schema."""

import copy
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
import pandas as pd
from seedgraph.config.logging import get_logger
from seedgraph.schema.models import EntitySpec, FieldSpec, SchemaIR
from .base import StoreError

logger = get_logger(__name__)

Record = Dict[str, Any]


class MemoryStore:
    """
    Persistence session keeping records in memory.

    Behaves like a relational store for seeding purposes: required fields
    and foreign keys must be present, ids and unique fields must not repeat,
    connect instructions must name an existing record, and field defaults
    (``autoincrement()``, ``uuid()``/``cuid()``, ``now()``, ``@updatedAt``,
    literals) are applied on create.
    """

    def __init__(self, schema: SchemaIR):
        self.schema = schema
        self._tables: Dict[str, List[Record]] = {e.name: [] for e in schema.entities}
        self.closed = False

    def _entity(self, name: str) -> EntitySpec:
        entity = self.schema.entity(name)
        if entity is None:
            raise StoreError(f"Unknown entity '{name}'")
        return entity

    def _check_open(self) -> None:
        if self.closed:
            raise StoreError("Store is closed")

    def _find(self, entity: str, where: Dict[str, Any]) -> Optional[Record]:
        if not where:
            raise StoreError(f"Empty selector for '{entity}'")
        for row in self._tables[entity]:
            if all(k in row and row[k] == v for k, v in where.items()):
                return row
        return None

    def _connect(self, entity: EntitySpec, field: FieldSpec, value: Any, row: Record) -> None:
        if not field.relation_from_fields:
            raise StoreError(
                f"Cannot write '{entity.name}.{field.name}': relation is stored on '{field.type}'"
            )
        if value is None:
            for fk in field.relation_from_fields:
                row[fk] = None
            return
        if not isinstance(value, dict) or "connect" not in value:
            raise StoreError(f"Relation '{entity.name}.{field.name}' expects a connect instruction")

        where = value["connect"]
        target = self._find(field.type, where)
        if target is None:
            raise StoreError(f"No '{field.type}' record matches {where} for '{entity.name}.{field.name}'")
        for fk, ref in zip(field.relation_from_fields, field.relation_to_fields):
            row[fk] = target[ref]

    def _apply(self, entity: EntitySpec, row: Record, data: Dict[str, Any]) -> None:
        for key, value in data.items():
            field = entity.field(key)
            if field is None:
                raise StoreError(f"Unknown field '{entity.name}.{key}'")
            if field.is_relation:
                self._connect(entity, field, value, row)
            elif field.kind == "unsupported":
                raise StoreError(f"Field '{entity.name}.{key}' has an unsupported type")
            else:
                row[key] = copy.deepcopy(value)

    def _default_for(self, entity: EntitySpec, field: FieldSpec) -> Any:
        fn = field.default_function
        if fn == "dbgenerated":
            # Stand-in for a database-side generator
            fn = "autoincrement" if field.type in ("Int", "BigInt") else "uuid"
        if fn in ("autoincrement", "sequence"):
            taken = [r.get(field.name) for r in self._tables[entity.name]]
            return max((v for v in taken if isinstance(v, int)), default=0) + 1
        if fn == "uuid":
            return str(uuid.uuid4())
        if fn in ("cuid", "ulid", "nanoid"):
            return uuid.uuid4().hex
        if fn == "now" or field.is_updated_at:
            return datetime.now()
        if field.has_default_value and fn is None:
            return copy.deepcopy(field.default)
        if field.is_list:
            return []
        return None

    def _validate(self, entity: EntitySpec, row: Record, current: Optional[Record]) -> None:
        for field in entity.scalar_fields():
            if field.is_required and not field.is_list and row.get(field.name) is None:
                raise StoreError(f"Missing required field '{entity.name}.{field.name}'")

        for field in entity.relation_fields():
            if not field.relation_from_fields:
                continue
            values = [row.get(fk) for fk in field.relation_from_fields]
            if any(v is None for v in values):
                continue
            where = dict(zip(field.relation_to_fields, values))
            if self._find(field.type, where) is None and not (
                field.type == entity.name and all(row.get(k) == v for k, v in where.items())
            ):
                raise StoreError(
                    f"Foreign key '{entity.name}.{field.name}' references a missing '{field.type}' record"
                )

        unique_sets = [[f.name] for f in entity.scalar_fields() if f.is_id or f.is_unique]
        if entity.primary_key:
            unique_sets.append(list(entity.primary_key))
        for names in unique_sets:
            key = tuple(row.get(n) for n in names)
            if any(v is None for v in key):
                continue
            for other in self._tables[entity.name]:
                if other is current:
                    continue
                if tuple(other.get(n) for n in names) == key:
                    raise StoreError(
                        f"Unique constraint failed on '{entity.name}' ({', '.join(names)})"
                    )

    def create(self, entity: str, data: Dict[str, Any]) -> Record:
        self._check_open()
        spec = self._entity(entity)
        row: Record = {}
        self._apply(spec, row, data)
        for field in spec.scalar_fields():
            if field.name not in row:
                row[field.name] = self._default_for(spec, field)
        self._validate(spec, row, current=None)
        self._tables[entity].append(row)
        logger.debug(f"Created '{entity}' record: {row}")
        return dict(row)

    def update(self, entity: str, where: Dict[str, Any], data: Dict[str, Any]) -> Record:
        self._check_open()
        spec = self._entity(entity)
        current = self._find(entity, where)
        if current is None:
            raise StoreError(f"No '{entity}' record matches {where}")
        row = dict(current)
        self._apply(spec, row, data)
        for field in spec.scalar_fields():
            if field.is_updated_at and field.name not in data:
                row[field.name] = datetime.now()
        self._validate(spec, row, current=current)
        current.clear()
        current.update(row)
        return dict(current)

    def records(self, entity: str) -> List[Record]:
        """Copies of the records of ``entity``; readable after close."""
        self._entity(entity)
        return [dict(r) for r in self._tables[entity]]

    def count(self, entity: str) -> int:
        return len(self._tables[entity])

    def frames(self) -> Dict[str, pd.DataFrame]:
        """Every entity table as a DataFrame."""
        return {
            e.name: pd.DataFrame(self._tables[e.name], columns=[f.name for f in e.scalar_fields()])
            for e in self.schema.entities
        }

    def close(self) -> None:
        self.closed = True
