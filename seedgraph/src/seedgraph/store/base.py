"""Persistence collaborator contract."""

from typing import Any, Dict, Protocol


class StoreError(RuntimeError):
    """Raised by a store when a create or update cannot be performed."""


class PersistenceSession(Protocol):
    """
    Protocol for stores that persist seed records.

    Payloads map field names to values. Relation fields carry a connect
    instruction, ``{"connect": {<target field>: <value>, ...}}``, naming an
    existing record of the target entity by key.
    """

    def create(self, entity: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create one record.

        Args:
            entity: Entity type name
            data: Creation payload

        Returns:
            The persisted record as a field -> value mapping

        Raises:
            StoreError: If the record cannot be created
        """
        ...

    def update(self, entity: str, where: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update the record selected by ``where`` and return it.

        Raises:
            StoreError: If no record matches or the update is rejected
        """
        ...

    def close(self) -> None:
        """Release connections held by the store."""
        ...
