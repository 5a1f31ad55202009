"""Second records for self-relating entity types."""

from datetime import datetime, timedelta
from typing import List, Optional
from seedgraph.config.logging import get_logger
from seedgraph.schema.models import EntitySpec, FieldSpec
from .error_logging import log_error
from .materializer import RecordMaterializer
from .payload import connect_instruction
from .report import SelfRelationOutcome
from .state import Deferred, Record, record_key, record_label

logger = get_logger(__name__)


class SelfRelationResolver:
    """
    Gives every self-relating entity type a second record pointing at the first.

    The second record is built like any other record, then its self
    relation is connected to the first record. When the entity has an
    ``ordering_field`` timestamp, the second record is moved to just before
    the first one.
    """

    def __init__(
        self,
        materializer: RecordMaterializer,
        ordering_field: str = "createdAt",
        ordering_offset_seconds: float = 1.0,
    ):
        self.materializer = materializer
        self.table = materializer.table
        self.session = materializer.session
        self.ordering_field = ordering_field
        self.ordering_offset = timedelta(seconds=ordering_offset_seconds)

    def linking_field(self, entity: EntitySpec) -> Optional[FieldSpec]:
        """The self relation that stores the reference (the side with foreign key fields)."""
        for field in entity.self_relation_fields():
            if field.relation_from_fields:
                return field
        return None

    def resolve_all(self) -> List[SelfRelationOutcome]:
        outcomes = []
        for state in self.table.states():
            if not state.entity.has_self_relation():
                continue
            if len(state.created_records) >= 2:
                outcomes.append(
                    SelfRelationOutcome(
                        entity=state.entity.name,
                        status="skipped",
                        detail=f"already has {len(state.created_records)} records",
                    )
                )
                continue
            logger.info(f"=== Creating additional record for self-relation in {state.entity.name} ===")
            outcomes.append(self.resolve(state.entity.name))
        return outcomes

    def resolve(self, entity_name: str) -> SelfRelationOutcome:
        """
        Create the second, self-linked record of ``entity_name``.

        Failures are logged and reported in the outcome; they never raise.
        """
        state = self.table[entity_name]
        entity = state.entity

        field = self.linking_field(entity)
        if field is None:
            return SelfRelationOutcome(
                entity=entity_name,
                status="skipped",
                detail="self relation has no foreign key fields on this side",
            )

        if not state.created_records:
            result = self.materializer.try_create(entity_name)
            if isinstance(result, Deferred):
                return SelfRelationOutcome(
                    entity=entity_name, status="failed", detail=f"no first record: {result.reason}"
                )
        first = state.created_records[0]

        data = self.materializer.build_creation_data(entity_name)
        data[field.name] = connect_instruction(field, first)
        try:
            second = self.session.create(entity_name, data)
        except Exception as e:
            log_error(
                error=e,
                context={"field": field.name, "first": record_label(entity, first)},
                operation="creating additional self-relation record",
                entity_name=entity_name,
            )
            return SelfRelationOutcome(entity=entity_name, status="failed", detail=str(e))

        try:
            second = self._order_before(entity, first, second)
        except Exception as e:
            log_error(
                error=e,
                operation=f"adjusting {self.ordering_field}",
                entity_name=entity_name,
                field_name=self.ordering_field,
                log_level="warning",
            )

        state.created_records.append(second)
        label = record_label(entity, second)
        logger.info(f"  Created additional record in {entity_name} (ID: {label}) linked through '{field.name}'")
        return SelfRelationOutcome(entity=entity_name, status="linked", detail=label)

    def _order_before(self, entity: EntitySpec, first: Record, second: Record) -> Record:
        """Move ``second`` to just before ``first`` on the ordering timestamp."""
        field = entity.field(self.ordering_field)
        if field is None or field.type != "DateTime" or field.is_list:
            return second
        anchor = first.get(self.ordering_field)
        if anchor is None:
            return second
        if isinstance(anchor, str):
            anchor = datetime.fromisoformat(anchor)
        return self.session.update(
            entity.name,
            record_key(entity, second),
            {self.ordering_field: anchor - self.ordering_offset},
        )
