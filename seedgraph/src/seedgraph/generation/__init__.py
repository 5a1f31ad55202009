"""Dependency-ordered seed record generation."""

from .graph import DependencyNode, build_dependency_graph
from .ordering import OrderResult, topological_sort
from .synthesizer import UNSET, ValueSynthesizer
from .state import Created, Deferred, EntityRunState, RunStateTable
from .payload import build_creation_data, connect_instruction
from .materializer import RecordMaterializer
from .self_relation import SelfRelationResolver
from .report import DeferredAttempt, SeedReport, SelfRelationOutcome
from .pipeline import generate_seed_data, seed_schema

__all__ = [
    "DependencyNode",
    "build_dependency_graph",
    "OrderResult",
    "topological_sort",
    "UNSET",
    "ValueSynthesizer",
    "Created",
    "Deferred",
    "EntityRunState",
    "RunStateTable",
    "build_creation_data",
    "connect_instruction",
    "RecordMaterializer",
    "SelfRelationResolver",
    "DeferredAttempt",
    "SeedReport",
    "SelfRelationOutcome",
    "generate_seed_data",
    "seed_schema",
]
