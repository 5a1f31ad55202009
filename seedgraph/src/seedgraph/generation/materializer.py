"""Multi-pass creation of one base record per entity type."""

from typing import Any, Dict, List, Optional, Sequence
from seedgraph.config.logging import get_logger
from seedgraph.store.base import PersistenceSession
from .constants import DEFAULT_MAX_PASSES
from .payload import build_creation_data
from .report import DeferredAttempt
from .state import AttemptResult, Created, Deferred, RunStateTable, record_label
from .synthesizer import ValueSynthesizer

logger = get_logger(__name__)


class RecordMaterializer:
    """
    Creates records entity by entity, retrying the ones whose prerequisites
    were missing.

    A failed create is not an error here: it means a related record does
    not exist yet. Every pass walks the creation order once and skips
    entity types that already have a record. The loop ends when everything
    is created, when a pass creates nothing, or after ``max_passes``.
    """

    def __init__(
        self,
        session: PersistenceSession,
        table: RunStateTable,
        synthesizer: ValueSynthesizer,
        max_passes: int = DEFAULT_MAX_PASSES,
    ):
        self.session = session
        self.table = table
        self.synthesizer = synthesizer
        self.max_passes = max_passes
        self.deferred: List[DeferredAttempt] = []

    def build_creation_data(self, entity_name: str) -> Dict[str, Any]:
        return build_creation_data(self.table, entity_name, self.synthesizer)

    def try_create(self, entity_name: str, pass_number: Optional[int] = None) -> AttemptResult:
        """
        Attempt to create one record of ``entity_name``.

        Args:
            entity_name: Entity type to create
            pass_number: Current pass, recorded with deferred attempts

        Returns:
            Created with the persisted record, or Deferred with the failure reason
        """
        state = self.table[entity_name]
        data = self.build_creation_data(entity_name)
        try:
            record = self.session.create(entity_name, data)
        except Exception as e:
            # Any store failure means "not creatable yet"
            reason = f"{type(e).__name__}: {e}"
            logger.warning(f"  Failed to create {entity_name}, waiting for next pass: {e}")
            self.deferred.append(
                DeferredAttempt(entity=entity_name, pass_number=pass_number, reason=reason)
            )
            return Deferred(entity=entity_name, reason=reason)

        state.created_records.append(record)
        state.created = True
        logger.info(f"  Created record in {entity_name} (ID: {record_label(state.entity, record)})")
        return Created(entity=entity_name, record=record)

    def run(self, order: Sequence[str]) -> int:
        """
        Run creation passes over ``order``.

        Args:
            order: Entity names in creation order

        Returns:
            Number of passes executed
        """
        passes = 0
        for pass_number in range(1, self.max_passes + 1):
            if self.table.all_created():
                break
            passes = pass_number
            logger.info(f"=== Starting pass #{pass_number} ===")

            created_any = False
            for entity_name in order:
                if self.table[entity_name].created:
                    continue
                if isinstance(self.try_create(entity_name, pass_number), Created):
                    created_any = True

            if not created_any:
                logger.info("No more records to create, stopping early")
                break

        missing = self.table.missing()
        if missing:
            logger.warning(
                f"Stopped after {passes} pass(es) with {len(missing)} entity type(s) "
                f"still empty: {', '.join(missing)}"
            )
        return passes
