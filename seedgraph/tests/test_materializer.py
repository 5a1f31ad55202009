"""Tests for payload assembly and the multi-pass materializer."""

from seedgraph.generation.materializer import RecordMaterializer
from seedgraph.generation.payload import build_creation_data, connect_instruction
from seedgraph.generation.state import Created, Deferred, RunStateTable
from seedgraph.generation.synthesizer import ValueSynthesizer
from seedgraph.schema.models import SchemaIR
from seedgraph.store.base import StoreError


def materializer_for(schema, session, max_passes=5):
    table = RunStateTable(schema)
    return RecordMaterializer(session, table, ValueSynthesizer(seed=1), max_passes=max_passes)


class FailingSession:
    def __init__(self):
        self.closed = False

    def create(self, entity, data):
        raise StoreError("database unavailable")

    def update(self, entity, where, data):
        raise StoreError("database unavailable")

    def close(self):
        self.closed = True


def test_payload_skips_foreign_keys_and_identifiers(blog_schema):
    table = RunStateTable(blog_schema)
    data = build_creation_data(table, "Post", ValueSynthesizer())
    assert "id" not in data
    assert "authorId" not in data
    assert "author" not in data
    assert data["title"] == "fake_title"
    assert data["published"] is False
    assert data["meta"] == {"example": "data"}
    assert data["tags"] == []


def test_payload_connects_first_record(blog_schema):
    table = RunStateTable(blog_schema)
    table["Level"].created_records.extend([{"id": 10, "name": "a"}, {"id": 11, "name": "b"}])
    data = build_creation_data(table, "User", ValueSynthesizer(enums=blog_schema.enum_values()))
    assert data["level"] == {"connect": {"id": 10}}
    assert "manager" not in data
    assert "reports" not in data
    assert data["role"] == "USER"


def test_connect_instruction_uses_every_referenced_field():
    from seedgraph.schema.models import FieldSpec

    relation = FieldSpec(
        name="membership",
        kind="object",
        type="Membership",
        relation_from_fields=["userId", "teamId"],
        relation_to_fields=["userId", "teamId"],
    )
    record = {"userId": 1, "teamId": 2, "role": "x"}
    assert connect_instruction(relation, record) == {"connect": {"userId": 1, "teamId": 2}}


def test_dependency_created_before_dependent(entity_factory, recording_session):
    schema = SchemaIR(entities=[entity_factory("X", requires=["Y"]), entity_factory("Y")])
    session = recording_session(schema)
    materializer = materializer_for(schema, session)

    passes = materializer.run(["Y", "X"])

    assert passes == 1
    assert [c[1] for c in session.calls] == ["Y", "X"]
    y_record = materializer.table["Y"].first_record
    _, _, x_payload = session.calls[1]
    assert x_payload["y"] == {"connect": {"id": y_record["id"]}}
    assert materializer.table["X"].first_record["yId"] == y_record["id"]


def test_failed_attempt_is_retried_next_pass(entity_factory, recording_session):
    schema = SchemaIR(entities=[entity_factory("X", requires=["Y"]), entity_factory("Y")])
    materializer = materializer_for(schema, recording_session(schema))

    passes = materializer.run(["X", "Y"])

    assert passes == 2
    assert materializer.table.all_created()
    assert [(d.entity, d.pass_number) for d in materializer.deferred] == [("X", 1)]
    assert "StoreError" in materializer.deferred[0].reason


def test_try_create_returns_tagged_results(entity_factory, recording_session):
    schema = SchemaIR(entities=[entity_factory("X", requires=["Y"]), entity_factory("Y")])
    materializer = materializer_for(schema, recording_session(schema))

    deferred = materializer.try_create("X")
    assert isinstance(deferred, Deferred)
    assert not materializer.table["X"].created

    created = materializer.try_create("Y")
    assert isinstance(created, Created)
    assert materializer.table["Y"].created
    assert materializer.table["Y"].created_records == [created.record]


def test_chain_of_depth_five_needs_five_passes(chain_schema, recording_session):
    schema = chain_schema(5)
    materializer = materializer_for(schema, recording_session(schema), max_passes=5)

    # Dependents first: each pass can only create one more entity
    passes = materializer.run(["E5", "E4", "E3", "E2", "E1"])

    assert passes == 5
    assert materializer.table.all_created()


def test_chain_of_depth_six_leaves_deepest_empty(chain_schema, recording_session):
    schema = chain_schema(6)
    materializer = materializer_for(schema, recording_session(schema), max_passes=5)

    passes = materializer.run(["E6", "E5", "E4", "E3", "E2", "E1"])

    assert passes == 5
    assert materializer.table.missing() == ["E6"]


def test_cyclic_pair_stops_without_progress(entity_factory, recording_session):
    schema = SchemaIR(
        entities=[entity_factory("X", requires=["Y"]), entity_factory("Y", requires=["X"])]
    )
    session = recording_session(schema)
    materializer = materializer_for(schema, session)

    passes = materializer.run(["X", "Y"])

    assert passes == 1
    assert len(session.calls) == 2
    assert materializer.table.missing() == ["X", "Y"]


def test_optional_relation_does_not_block(entity_factory, recording_session):
    schema = SchemaIR(entities=[entity_factory("X", optional=["Y"]), entity_factory("Y")])
    session = recording_session(schema)
    materializer = materializer_for(schema, session)

    materializer.run(["X", "Y"])

    x_record = materializer.table["X"].first_record
    assert x_record["optYId"] is None
    assert "optY" not in session.calls[0][2]


def test_store_failures_never_raise(blog_schema):
    materializer = materializer_for(blog_schema, FailingSession())
    passes = materializer.run(["Level", "User", "Post"])
    assert passes == 1
    assert materializer.table.missing() == ["Level", "User", "Post"]
    assert len(materializer.deferred) == 3


def test_already_complete_runs_no_pass(entity_factory, recording_session):
    schema = SchemaIR(entities=[entity_factory("Y")])
    session = recording_session(schema)
    materializer = materializer_for(schema, session)
    materializer.run(["Y"])
    assert materializer.run(["Y"]) == 0
    assert len(session.calls) == 1
