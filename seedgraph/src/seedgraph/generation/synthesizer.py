"""Placeholder values for individual scalar fields."""

import copy
import string
from datetime import datetime
from typing import Any, Dict, List, Optional
from faker import Faker
from seedgraph.schema.models import FieldSpec
from .constants import (
    BOOL_TYPES,
    DATETIME_TYPES,
    FLOAT_TYPES,
    INT_TYPES,
    JSON_TYPES,
    PLACEHOLDER_BOOL,
    PLACEHOLDER_FLOAT,
    PLACEHOLDER_INT,
    PLACEHOLDER_JSON,
    PLACEHOLDER_TEXT_PREFIX,
    STORE_GENERATED_DEFAULTS,
    TEXT_TYPES,
    UNIQUE_TEXT_PREFIX,
    UNIQUE_TOKEN_LENGTH,
)


class _Unset:
    """Marker for a value the store should assign itself."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


class ValueSynthesizer:
    """
    Produces placeholder values for scalar and enum fields.

    Unique text values are drawn through Faker's unique proxy, so two calls
    never return the same token within one synthesizer.
    """

    def __init__(
        self,
        locale: str = "en_US",
        seed: Optional[int] = None,
        enums: Optional[Dict[str, List[str]]] = None,
    ):
        self.fk = Faker(locale)
        if seed is not None:
            self.fk.seed_instance(seed)
        self.enums = enums or {}

    def placeholder_text(self, field: FieldSpec) -> str:
        return f"{PLACEHOLDER_TEXT_PREFIX}{field.name}"

    def unique_token(self) -> str:
        pattern = UNIQUE_TEXT_PREFIX + "?" * UNIQUE_TOKEN_LENGTH
        return self.fk.unique.lexify(pattern, letters=string.ascii_lowercase + string.digits)

    def value_for(self, field: FieldSpec) -> Any:
        """
        Synthesize a value for one scalar or enum field.

        Args:
            field: Field specification

        Returns:
            Placeholder value, or UNSET when the store should assign it
        """
        if field.is_list:
            return []
        if field.default_function in STORE_GENERATED_DEFAULTS:
            return UNSET

        if field.kind == "enum":
            values = self.enums.get(field.type)
            if values:
                return values[0]
            return self.placeholder_text(field) if field.is_required else None

        type_name = field.type
        if type_name in TEXT_TYPES:
            if field.is_id:
                return UNSET
            if field.is_unique:
                return self.unique_token()
            return self.placeholder_text(field)
        if type_name in INT_TYPES:
            return PLACEHOLDER_INT
        if type_name in FLOAT_TYPES:
            return PLACEHOLDER_FLOAT
        if type_name in BOOL_TYPES:
            return PLACEHOLDER_BOOL
        if type_name in DATETIME_TYPES:
            return datetime.now()
        if type_name in JSON_TYPES:
            return copy.deepcopy(PLACEHOLDER_JSON)
        return self.placeholder_text(field) if field.is_required else None
