"""DuckDB-backed persistence session."""

import json
from datetime import datetime
from typing import Any, Dict, List, Tuple
import duckdb
import pandas as pd
from seedgraph.config.logging import get_logger
from seedgraph.schema.models import EntitySpec, FieldSpec, SchemaIR
from .base import StoreError

logger = get_logger(__name__)

SQL_TYPES = {
    "String": "VARCHAR",
    "Int": "INTEGER",
    "BigInt": "BIGINT",
    "Float": "DOUBLE",
    "Decimal": "DOUBLE",
    "Boolean": "BOOLEAN",
    "DateTime": "TIMESTAMP",
    "Json": "VARCHAR",
    "Bytes": "BLOB",
}

GENERATED_ID_FUNCTIONS = {"uuid", "cuid", "ulid", "nanoid"}


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _sql_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


def _is_encoded(field: FieldSpec) -> bool:
    """Fields stored as JSON text."""
    return field.is_list or field.type == "Json"


class DuckDBStore:
    """
    Persistence session writing one DuckDB table per entity type.

    Tables are created on open. Required fields without a default are NOT
    NULL, ids are primary keys backed by sequences or ``uuid()``, and
    connect instructions are resolved by reading the target table, so a
    missing prerequisite surfaces as a StoreError.
    """

    def __init__(self, schema: SchemaIR, database: str = ":memory:"):
        self.schema = schema
        self.database = str(database)
        try:
            self.con = duckdb.connect(self.database)
            for entity in schema.entities:
                self._create_table(entity)
        except duckdb.Error as e:
            raise StoreError(f"Failed to initialise DuckDB store at {self.database}: {e}") from e
        logger.info(f"Opened DuckDB store at {self.database} ({len(schema.entities)} table(s))")

    def _columns(self, entity: EntitySpec) -> List[FieldSpec]:
        return [f for f in entity.scalar_fields() if f.kind != "unsupported"]

    def _create_table(self, entity: EntitySpec) -> None:
        definitions = []
        for field in self._columns(entity):
            if field.kind == "enum" or _is_encoded(field):
                sql_type = "VARCHAR"
            else:
                sql_type = SQL_TYPES.get(field.type, "VARCHAR")
            parts = [_quote(field.name), sql_type]

            fn = field.default_function
            if fn == "dbgenerated":
                fn = "autoincrement" if field.type in ("Int", "BigInt") else "uuid"
            has_default = True
            if fn in ("autoincrement", "sequence"):
                sequence = f"seq_{entity.name}_{field.name}".lower()
                self.con.execute(f"CREATE SEQUENCE IF NOT EXISTS {sequence} START 1")
                parts.append(f"DEFAULT nextval('{sequence}')")
            elif fn in GENERATED_ID_FUNCTIONS:
                parts.append("DEFAULT CAST(uuid() AS VARCHAR)")
            elif fn == "now":
                parts.append("DEFAULT current_timestamp")
            elif field.has_default_value and fn is None and not isinstance(field.default, list):
                parts.append(f"DEFAULT {_sql_literal(field.default)}")
            else:
                has_default = False

            if field.is_required and not field.is_list and not has_default:
                parts.append("NOT NULL")
            if field.is_id:
                parts.append("PRIMARY KEY")
            elif field.is_unique:
                parts.append("UNIQUE")
            definitions.append(" ".join(parts))

        if entity.primary_key and not any(f.is_id for f in entity.fields):
            definitions.append(
                f"PRIMARY KEY ({', '.join(_quote(n) for n in entity.primary_key)})"
            )

        self.con.execute(
            f"CREATE TABLE IF NOT EXISTS {_quote(entity.name)} ({', '.join(definitions)})"
        )

    def _entity(self, name: str) -> EntitySpec:
        entity = self.schema.entity(name)
        if entity is None:
            raise StoreError(f"Unknown entity '{name}'")
        return entity

    def _where(self, where: Dict[str, Any]) -> Tuple[str, List[Any]]:
        if not where:
            raise StoreError("Empty selector")
        clause = " AND ".join(f"{_quote(k)} = ?" for k in where)
        return clause, list(where.values())

    def _resolve_connect(self, entity: EntitySpec, field: FieldSpec, value: Any) -> Dict[str, Any]:
        if not field.relation_from_fields:
            raise StoreError(
                f"Cannot write '{entity.name}.{field.name}': relation is stored on '{field.type}'"
            )
        if value is None:
            return {fk: None for fk in field.relation_from_fields}
        if not isinstance(value, dict) or "connect" not in value:
            raise StoreError(f"Relation '{entity.name}.{field.name}' expects a connect instruction")

        clause, params = self._where(value["connect"])
        refs = ", ".join(_quote(r) for r in field.relation_to_fields)
        row = self.con.execute(
            f"SELECT {refs} FROM {_quote(field.type)} WHERE {clause} LIMIT 1", params
        ).fetchone()
        if row is None:
            raise StoreError(
                f"No '{field.type}' record matches {value['connect']} for '{entity.name}.{field.name}'"
            )
        return dict(zip(field.relation_from_fields, row))

    def _encode(self, entity: EntitySpec, data: Dict[str, Any]) -> Dict[str, Any]:
        columns: Dict[str, Any] = {}
        for key, value in data.items():
            field = entity.field(key)
            if field is None:
                raise StoreError(f"Unknown field '{entity.name}.{key}'")
            if field.is_relation:
                columns.update(self._resolve_connect(entity, field, value))
            elif field.kind == "unsupported":
                raise StoreError(f"Field '{entity.name}.{key}' has an unsupported type")
            elif _is_encoded(field) and value is not None:
                columns[key] = json.dumps(value, default=str)
            else:
                columns[key] = value
        return columns

    def _decode(self, entity: EntitySpec, names: List[str], row: tuple) -> Dict[str, Any]:
        record = dict(zip(names, row))
        for field in self._columns(entity):
            if _is_encoded(field) and isinstance(record.get(field.name), str):
                record[field.name] = json.loads(record[field.name])
        return record

    def _fetch_one(self, sql: str, params: List[Any], entity: EntitySpec) -> Dict[str, Any]:
        cur = self.con.execute(sql, params)
        row = cur.fetchone()
        if row is None:
            raise StoreError(f"No '{entity.name}' record returned")
        names = [d[0] for d in cur.description]
        return self._decode(entity, names, row)

    def create(self, entity: str, data: Dict[str, Any]) -> Dict[str, Any]:
        spec = self._entity(entity)
        try:
            columns = self._encode(spec, data)
            table = _quote(entity)
            if columns:
                names = ", ".join(_quote(k) for k in columns)
                marks = ", ".join("?" for _ in columns)
                sql = f"INSERT INTO {table} ({names}) VALUES ({marks}) RETURNING *"
            else:
                sql = f"INSERT INTO {table} DEFAULT VALUES RETURNING *"
            return self._fetch_one(sql, list(columns.values()), spec)
        except duckdb.Error as e:
            raise StoreError(f"Failed to create '{entity}' record: {e}") from e

    def update(self, entity: str, where: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        spec = self._entity(entity)
        table = _quote(entity)
        try:
            clause, where_params = self._where(where)
            exists = self.con.execute(
                f"SELECT COUNT(*) FROM {table} WHERE {clause}", where_params
            ).fetchone()
            if not exists or exists[0] == 0:
                raise StoreError(f"No '{entity}' record matches {where}")

            columns = self._encode(spec, data)
            for field in spec.scalar_fields():
                if field.is_updated_at and field.name not in columns:
                    columns[field.name] = datetime.now()
            if columns:
                assignments = ", ".join(f"{_quote(k)} = ?" for k in columns)
                self.con.execute(
                    f"UPDATE {table} SET {assignments} WHERE {clause}",
                    list(columns.values()) + where_params,
                )
            return self._fetch_one(f"SELECT * FROM {table} WHERE {clause}", where_params, spec)
        except duckdb.Error as e:
            raise StoreError(f"Failed to update '{entity}' record: {e}") from e

    def count(self, entity: str) -> int:
        self._entity(entity)
        row = self.con.execute(f"SELECT COUNT(*) FROM {_quote(entity)}").fetchone()
        return int(row[0]) if row else 0

    def frames(self) -> Dict[str, pd.DataFrame]:
        """Every entity table as a DataFrame."""
        return {
            e.name: self.con.execute(f"SELECT * FROM {_quote(e.name)}").df()
            for e in self.schema.entities
        }

    def close(self) -> None:
        self.con.close()
        logger.debug(f"Closed DuckDB store at {self.database}")
