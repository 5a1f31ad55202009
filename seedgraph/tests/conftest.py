"""Shared fixtures for seedgraph tests."""

from typing import List, Sequence

import pytest

from seedgraph.config.settings import Settings
from seedgraph.schema.models import EntitySpec, FieldSpec, SchemaIR
from seedgraph.schema.prisma_parser import parse_prisma_schema
from seedgraph.store.memory import MemoryStore


BLOG_PRISMA = """
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

generator client {
  provider = "prisma-client-js"
}

enum Role {
  USER
  ADMIN
}

// Access levels
model Level {
  id    Int    @id @default(autoincrement())
  name  String
  users User[]
}

model User {
  id        Int      @id @default(autoincrement())
  email     String   @unique
  name      String?
  role      Role     @default(USER)
  createdAt DateTime @default(now())
  levelId   Int
  level     Level    @relation(fields: [levelId], references: [id])
  managerId Int?
  manager   User?    @relation("Management", fields: [managerId], references: [id])
  reports   User[]   @relation("Management")
  posts     Post[]
}

model Post {
  id        String   @id @default(uuid())
  title     String
  published Boolean  @default(false)
  meta      Json?
  authorId  Int
  author    User     @relation(fields: [authorId], references: [id])
  tags      String[]
}
"""


def id_field() -> FieldSpec:
    return FieldSpec(
        name="id",
        kind="scalar",
        type="Int",
        is_id=True,
        is_required=True,
        has_default_value=True,
        default={"name": "autoincrement", "args": []},
    )


def relation_fields(name: str, target: str, required: bool = True) -> List[FieldSpec]:
    """Foreign key scalar plus the relation field that owns it."""
    return [
        FieldSpec(name=f"{name}Id", kind="scalar", type="Int", is_required=required, is_read_only=True),
        FieldSpec(
            name=name,
            kind="object",
            type=target,
            is_required=required,
            relation_from_fields=[f"{name}Id"],
            relation_to_fields=["id"],
        ),
    ]


def make_entity(name: str, requires: Sequence[str] = (), optional: Sequence[str] = ()) -> EntitySpec:
    fields = [id_field(), FieldSpec(name="label", kind="scalar", type="String", is_required=True)]
    for target in requires:
        fields += relation_fields(target.lower(), target, required=True)
    for target in optional:
        fields += relation_fields(f"opt{target}", target, required=False)
    return EntitySpec(name=name, fields=fields)


def make_chain(depth: int) -> SchemaIR:
    """E1 <- E2 <- ... <- E<depth>, each requiring the previous one."""
    entities = [make_entity("E1")]
    for i in range(2, depth + 1):
        entities.append(make_entity(f"E{i}", requires=[f"E{i - 1}"]))
    return SchemaIR(entities=entities)


class RecordingSession:
    """Session wrapper that remembers every call."""

    def __init__(self, store):
        self.store = store
        self.calls = []
        self.closed = False

    def create(self, entity, data):
        self.calls.append(("create", entity, data))
        return self.store.create(entity, data)

    def update(self, entity, where, data):
        self.calls.append(("update", entity, where, data))
        return self.store.update(entity, where, data)

    def close(self):
        self.closed = True
        self.store.close()


@pytest.fixture
def entity_factory():
    return make_entity


@pytest.fixture
def chain_schema():
    return make_chain


@pytest.fixture
def blog_prisma() -> str:
    return BLOG_PRISMA


@pytest.fixture
def blog_schema() -> SchemaIR:
    return parse_prisma_schema(BLOG_PRISMA)


@pytest.fixture
def blog_schema_file(tmp_path):
    path = tmp_path / "schema.prisma"
    path.write_text(BLOG_PRISMA, encoding="utf-8")
    return path


@pytest.fixture
def recording_session():
    def build(schema: SchemaIR) -> RecordingSession:
        return RecordingSession(MemoryStore(schema))

    return build


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        store_backend="memory",
        database_path=tmp_path / "seed.duckdb",
        max_passes=5,
        faker_seed=7,
    )
