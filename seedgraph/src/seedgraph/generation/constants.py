"""Constants for placeholder record generation."""

DEFAULT_MAX_PASSES = 5

# Placeholder scalar values
PLACEHOLDER_INT = 123
PLACEHOLDER_FLOAT = 1.23
PLACEHOLDER_BOOL = False
PLACEHOLDER_JSON = {"example": "data"}
PLACEHOLDER_TEXT_PREFIX = "fake_"
UNIQUE_TEXT_PREFIX = "unique_"
UNIQUE_TOKEN_LENGTH = 8

TEXT_TYPES = {"String"}
INT_TYPES = {"Int", "BigInt"}
FLOAT_TYPES = {"Float", "Decimal"}
BOOL_TYPES = {"Boolean"}
DATETIME_TYPES = {"DateTime"}
JSON_TYPES = {"Json"}

# Default functions whose value the store generates itself
STORE_GENERATED_DEFAULTS = {"autoincrement", "dbgenerated", "sequence"}

# Connect instruction key used in creation payloads
CONNECT = "connect"
