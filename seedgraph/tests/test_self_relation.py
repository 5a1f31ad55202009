"""Tests for the second, self-linked record of self-relating entities."""

from datetime import timedelta

from seedgraph.generation.materializer import RecordMaterializer
from seedgraph.generation.self_relation import SelfRelationResolver
from seedgraph.generation.state import RunStateTable
from seedgraph.generation.synthesizer import ValueSynthesizer
from seedgraph.schema.models import EntitySpec, FieldSpec, SchemaIR
from seedgraph.schema.prisma_parser import parse_prisma_schema
from seedgraph.store.base import StoreError
from seedgraph.store.memory import MemoryStore

NODE_PRISMA = """
model Node {
  id       Int    @id @default(autoincrement())
  label    String
  nextId   Int?   @unique
  next     Node?  @relation("Chain", fields: [nextId], references: [id])
  previous Node?  @relation("Chain")
}
"""


def run_resolver(schema, session, order):
    table = RunStateTable(schema)
    materializer = RecordMaterializer(
        session, table, ValueSynthesizer(enums=schema.enum_values()), max_passes=5
    )
    materializer.run(order)
    resolver = SelfRelationResolver(materializer, ordering_field="createdAt", ordering_offset_seconds=1)
    return resolver.resolve_all(), table


def test_second_record_points_at_first(blog_schema, recording_session):
    session = recording_session(blog_schema)
    outcomes, table = run_resolver(blog_schema, session, ["Level", "User", "Post"])

    assert [(o.entity, o.status) for o in outcomes] == [("User", "linked")]
    users = session.store.records("User")
    assert len(users) == 2
    first, second = users
    assert first["managerId"] is None
    assert second["managerId"] == first["id"]
    assert second["levelId"] == first["levelId"]
    assert second["email"] != first["email"]
    assert len(table["User"].created_records) == 2


def test_second_record_is_ordered_before_first(blog_schema, recording_session):
    session = recording_session(blog_schema)
    run_resolver(blog_schema, session, ["Level", "User", "Post"])

    first, second = session.store.records("User")
    assert second["createdAt"] == first["createdAt"] - timedelta(seconds=1)
    updates = [c for c in session.calls if c[0] == "update"]
    assert len(updates) == 1
    assert updates[0][2] == {"id": second["id"]}


def test_owning_side_is_linked_without_ordering_field(recording_session):
    schema = parse_prisma_schema(NODE_PRISMA)
    session = recording_session(schema)
    outcomes, _ = run_resolver(schema, session, ["Node"])

    assert outcomes[0].status == "linked"
    first, second = session.store.records("Node")
    assert second["nextId"] == first["id"]
    assert not [c for c in session.calls if c[0] == "update"]


def test_first_record_created_when_missing(blog_schema, recording_session):
    session = recording_session(blog_schema)
    table = RunStateTable(blog_schema)
    materializer = RecordMaterializer(session, table, ValueSynthesizer(), max_passes=5)
    materializer.run(["Level"])

    outcome = SelfRelationResolver(materializer).resolve("User")

    assert outcome.status == "linked"
    assert len(session.store.records("User")) == 2
    assert table["User"].created


def test_failure_is_reported_not_raised(blog_schema):
    class NoSelfLinks(MemoryStore):
        def create(self, entity, data):
            if "manager" in data:
                raise StoreError("self links disabled")
            return super().create(entity, data)

    store = NoSelfLinks(blog_schema)
    outcomes, table = run_resolver(blog_schema, store, ["Level", "User", "Post"])

    assert outcomes[0].status == "failed"
    assert "self links disabled" in outcomes[0].detail
    assert len(store.records("User")) == 1
    assert len(table["User"].created_records) == 1


def test_missing_prerequisite_fails_first_record(blog_schema, recording_session):
    session = recording_session(blog_schema)
    table = RunStateTable(blog_schema)
    materializer = RecordMaterializer(session, table, ValueSynthesizer(), max_passes=5)

    outcome = SelfRelationResolver(materializer).resolve("User")

    assert outcome.status == "failed"
    assert outcome.detail.startswith("no first record")
    assert session.store.records("User") == []


def test_back_relation_only_is_skipped():
    entity = EntitySpec(
        name="Folder",
        fields=[
            FieldSpec(name="id", kind="scalar", type="Int", is_id=True, is_required=True,
                      has_default_value=True, default={"name": "autoincrement", "args": []}),
            FieldSpec(name="parent", kind="object", type="Folder", relation_name="Tree"),
        ],
    )
    schema = SchemaIR(entities=[entity])
    outcomes, _ = run_resolver(schema, MemoryStore(schema), ["Folder"])
    assert outcomes[0].status == "skipped"


def test_entities_with_two_records_are_left_alone(blog_schema, recording_session):
    session = recording_session(blog_schema)
    table = RunStateTable(blog_schema)
    materializer = RecordMaterializer(session, table, ValueSynthesizer(), max_passes=5)
    materializer.run(["Level", "User", "Post"])
    materializer.try_create("User")

    outcomes = SelfRelationResolver(materializer).resolve_all()

    assert outcomes[0].status == "skipped"
    assert len(session.store.records("User")) == 2
