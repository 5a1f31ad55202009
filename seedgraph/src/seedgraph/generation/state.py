"""Per-run state of each entity type and tagged attempt results."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union
from seedgraph.schema.models import EntitySpec, SchemaIR

Record = Dict[str, Any]


@dataclass
class EntityRunState:
    """Records created so far for one entity type during a run."""

    entity: EntitySpec
    created_records: List[Record] = field(default_factory=list)
    created: bool = False

    @property
    def first_record(self) -> Optional[Record]:
        return self.created_records[0] if self.created_records else None


class RunStateTable:
    """Run state of every entity type, indexed by entity name."""

    def __init__(self, schema: SchemaIR):
        self._states: Dict[str, EntityRunState] = {
            e.name: EntityRunState(entity=e) for e in schema.entities
        }

    def __getitem__(self, name: str) -> EntityRunState:
        return self._states[name]

    def __contains__(self, name: object) -> bool:
        return name in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def get(self, name: str) -> Optional[EntityRunState]:
        return self._states.get(name)

    def states(self) -> List[EntityRunState]:
        return list(self._states.values())

    def all_created(self) -> bool:
        return all(s.created for s in self._states.values())

    def missing(self) -> List[str]:
        """Entity types that still have no base record."""
        return [name for name, s in self._states.items() if not s.created]

    def record_counts(self) -> Dict[str, int]:
        return {name: len(s.created_records) for name, s in self._states.items()}


@dataclass
class Created:
    """A creation attempt that persisted a record."""

    entity: str
    record: Record


@dataclass
class Deferred:
    """A creation attempt that failed; its prerequisites may appear later."""

    entity: str
    reason: str


AttemptResult = Union[Created, Deferred]


def record_label(entity: EntitySpec, record: Record) -> str:
    """Identifying value of a record for progress messages."""
    ids = entity.id_fields()
    if ids and all(k in record for k in ids):
        return ", ".join(str(record[k]) for k in ids)
    if record:
        return str(next(iter(record.values())))
    return "?"


def record_key(entity: EntitySpec, record: Record) -> Dict[str, Any]:
    """Unique selector (``where`` clause) for a persisted record."""
    ids = entity.id_fields()
    if not ids:
        ids = [f.name for f in entity.scalar_fields() if f.is_unique][:1]
    if not ids:
        raise KeyError(f"Entity '{entity.name}' has no id or unique field to select records by")
    return {k: record[k] for k in ids}
