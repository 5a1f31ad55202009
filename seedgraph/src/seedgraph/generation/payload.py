"""Creation payload assembly for one entity type."""

from typing import Any, Dict
from seedgraph.schema.models import FieldSpec
from .constants import CONNECT
from .state import Record, RunStateTable
from .synthesizer import UNSET, ValueSynthesizer


def connect_instruction(relation: FieldSpec, record: Record) -> Dict[str, Dict[str, Any]]:
    """Payload fragment linking ``relation`` to an existing ``record`` by key."""
    return {CONNECT: {key: record.get(key) for key in relation.relation_to_fields}}


def build_creation_data(
    table: RunStateTable, entity_name: str, synthesizer: ValueSynthesizer
) -> Dict[str, Any]:
    """
    Assemble the data used to create one record of ``entity_name``.

    Fills every writable scalar field that is not a foreign key, then
    connects every non-list, non-self relation whose target already has a
    record to that target's first record. Relations whose target has no
    record yet are left out of the payload. Self relations are never filled
    here.

    Args:
        table: Run state of all entity types
        entity_name: Entity to build data for
        synthesizer: Scalar value synthesizer

    Returns:
        Creation payload
    """
    entity = table[entity_name].entity
    foreign_keys = entity.foreign_key_fields()
    data: Dict[str, Any] = {}

    for field in entity.scalar_fields():
        if field.is_read_only or field.name in foreign_keys:
            continue
        value = synthesizer.value_for(field)
        if value is UNSET:
            continue
        data[field.name] = value

    for field in entity.relation_fields():
        if field.type == entity_name or field.is_list:
            continue
        if not field.relation_from_fields:
            continue

        target = table.get(field.type)
        related = target.first_record if target else None
        if related is None:
            # Nothing to connect to yet; a required relation makes the attempt fail
            continue
        data[field.name] = connect_instruction(field, related)

    return data
