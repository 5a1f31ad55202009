"""Entity schema model mirroring the Prisma DMMF datamodel."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FieldKind = Literal["scalar", "object", "enum", "unsupported"]


class FieldSpec(BaseModel):
    """Specification for one field of an entity (scalar, enum or relation)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    kind: FieldKind
    type: str
    is_list: bool = Field(default=False, alias="isList")
    is_required: bool = Field(default=False, alias="isRequired")
    is_unique: bool = Field(default=False, alias="isUnique")
    is_id: bool = Field(default=False, alias="isId")
    is_read_only: bool = Field(default=False, alias="isReadOnly")
    is_updated_at: bool = Field(default=False, alias="isUpdatedAt")
    has_default_value: bool = Field(default=False, alias="hasDefaultValue")
    default: Optional[Any] = None  # literal, or {"name": "autoincrement", "args": []}
    relation_name: Optional[str] = Field(default=None, alias="relationName")
    relation_from_fields: List[str] = Field(default_factory=list, alias="relationFromFields")
    relation_to_fields: List[str] = Field(default_factory=list, alias="relationToFields")

    @field_validator("relation_from_fields", "relation_to_fields", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_relation(self) -> bool:
        return self.kind == "object"

    @property
    def default_function(self) -> Optional[str]:
        """Name of the default generator function (``autoincrement``, ``now``...), if any."""
        if isinstance(self.default, dict):
            return self.default.get("name")
        return None


class EntitySpec(BaseModel):
    """Specification for an entity type (a Prisma model)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    fields: List[FieldSpec]
    primary_key: List[str] = Field(default_factory=list, alias="primaryKey")

    @model_validator(mode="before")
    @classmethod
    def _unwrap_primary_key(cls, data: Any) -> Any:
        # DMMF renders compound ids as {"name": ..., "fields": [...]}
        if isinstance(data, dict) and "primaryKey" in data:
            pk = data["primaryKey"]
            if pk is None:
                pk = []
            elif isinstance(pk, dict):
                pk = pk.get("fields") or []
            data = {**data, "primaryKey": pk}
        return data

    def field(self, name: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def scalar_fields(self) -> List[FieldSpec]:
        return [f for f in self.fields if f.kind in ("scalar", "enum")]

    def relation_fields(self) -> List[FieldSpec]:
        return [f for f in self.fields if f.is_relation]

    def foreign_key_fields(self) -> set[str]:
        """Names of local fields that carry some relation's reference value."""
        names: set[str] = set()
        for f in self.relation_fields():
            names.update(f.relation_from_fields)
        return names

    def self_relation_fields(self) -> List[FieldSpec]:
        """Non-list relation fields whose target is this entity."""
        return [
            f for f in self.relation_fields()
            if f.type == self.name and not f.is_list
        ]

    def has_self_relation(self) -> bool:
        return bool(self.self_relation_fields())

    def id_fields(self) -> List[str]:
        """Fields identifying a record: the ``@id`` field, or the compound ``@@id``."""
        ids = [f.name for f in self.fields if f.is_id]
        return ids or list(self.primary_key)


class EnumSpec(BaseModel):
    """Specification for an enum type."""

    name: str
    values: List[str]


class SchemaIR(BaseModel):
    """Complete entity schema: entity types plus enums."""

    entities: List[EntitySpec]
    enums: List[EnumSpec] = Field(default_factory=list)

    def entity(self, name: str) -> Optional[EntitySpec]:
        for e in self.entities:
            if e.name == name:
                return e
        return None

    def entity_names(self) -> List[str]:
        return [e.name for e in self.entities]

    def enum_values(self) -> Dict[str, List[str]]:
        return {e.name: list(e.values) for e in self.enums}
