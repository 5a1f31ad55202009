"""seedgraph: dependency-ordered placeholder records for relational schemas."""

__version__ = "0.1.0"
