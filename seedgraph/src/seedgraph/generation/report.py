"""Run report for a seeding run."""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class DeferredAttempt(BaseModel):
    """A creation attempt that failed and was left for a later pass."""

    entity: str
    pass_number: Optional[int] = None
    reason: str


class SelfRelationOutcome(BaseModel):
    """Result of linking a self-relating entity type."""

    entity: str
    status: Literal["linked", "failed", "skipped"]
    detail: str = ""


class SeedReport(BaseModel):
    """Summary of one seeding run."""

    order: List[str]
    cyclic: List[str] = Field(default_factory=list)
    passes: int = 0
    max_passes: int
    records: Dict[str, int] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)
    self_relations: List[SelfRelationOutcome] = Field(default_factory=list)
    deferred: List[DeferredAttempt] = Field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def complete(self) -> bool:
        """True when every entity type received at least one record."""
        return not self.missing

    def self_relation_status(self, entity: str) -> Optional[str]:
        for outcome in self.self_relations:
            if outcome.entity == entity:
                return outcome.status
        return None
