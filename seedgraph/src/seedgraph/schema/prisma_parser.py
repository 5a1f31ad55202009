"""Parser for Prisma datamodel files (``schema.prisma``).

Only the parts of the language that matter for seeding are understood:
``model`` and ``enum`` blocks, field types with ``?``/``[]`` modifiers and the
``@id``, ``@unique``, ``@updatedAt``, ``@default(...)`` and ``@relation(...)``
field attributes, plus the ``@@id([...])`` block attribute. ``datasource``,
``generator``, comments and every other attribute are skipped.
"""

import re
from typing import Any, Dict, List, Optional, Tuple
from .errors import SchemaLoadError
from .models import EntitySpec, EnumSpec, FieldSpec, SchemaIR

BUILTIN_SCALARS = {
    "String",
    "Int",
    "BigInt",
    "Float",
    "Decimal",
    "Boolean",
    "DateTime",
    "Json",
    "Bytes",
}

_BLOCK_RE = re.compile(r"^\s*(model|enum|type|view)\s+(\w+)\s*\{(.*?)^\s*\}", re.S | re.M)
_FIELD_RE = re.compile(r"^(\w+)\s+([\w.]+(?:\([^)]*\))?)(\[\]|\?)?\s*(.*)$")
_ATTR_RE = re.compile(r"@(\w+(?:\.\w+)?)")
_LIST_ARG_RE = re.compile(r"(\w+)\s*:\s*\[([^\]]*)\]")


def _strip_comment(line: str) -> str:
    # Drop "//" comments that are not inside a string literal
    in_string = False
    for i, ch in enumerate(line):
        if ch == '"' and (i == 0 or line[i - 1] != "\\"):
            in_string = not in_string
        elif ch == "/" and not in_string and line[i:i + 2] == "//":
            return line[:i]
    return line


def _parse_attributes(text: str) -> List[Tuple[str, Optional[str]]]:
    """Split an attribute string into ``(name, raw_args)`` pairs, honouring nested parens."""
    attrs = []
    pos = 0
    while True:
        m = _ATTR_RE.search(text, pos)
        if not m:
            break
        name = m.group(1)
        end = m.end()
        args = None
        if end < len(text) and text[end] == "(":
            depth = 0
            for j in range(end, len(text)):
                if text[j] == "(":
                    depth += 1
                elif text[j] == ")":
                    depth -= 1
                    if depth == 0:
                        args = text[end + 1:j]
                        end = j + 1
                        break
            else:
                raise SchemaLoadError(f"Unbalanced parentheses in attribute: @{name}{text[end:]}")
        attrs.append((name, args))
        pos = end
    return attrs


def _split_names(raw: str) -> List[str]:
    return [n.strip() for n in raw.split(",") if n.strip()]


def _parse_default(raw: str) -> Any:
    """Translate a ``@default(...)`` argument into its DMMF representation."""
    raw = raw.strip()
    fn = re.match(r"^(\w+)\((.*)\)$", raw, re.S)
    if fn:
        args = [a.strip().strip('"') for a in fn.group(2).split(",") if a.strip()]
        return {"name": fn.group(1), "args": args}
    if raw.startswith('"') and raw.endswith('"'):
        return raw[1:-1]
    if raw in ("true", "false"):
        return raw == "true"
    if re.match(r"^-?\d+$", raw):
        return int(raw)
    if re.match(r"^-?\d+\.\d+$", raw):
        return float(raw)
    if raw.startswith("["):
        return [_parse_default(v) for v in _split_names(raw[1:-1])]
    # Bare identifier: an enum value
    return raw


def _parse_relation(raw: Optional[str]) -> Dict[str, Any]:
    info: Dict[str, Any] = {"name": None, "fields": [], "references": []}
    if not raw:
        return info
    for key, names in _LIST_ARG_RE.findall(raw):
        if key in ("fields", "references"):
            info[key] = _split_names(names)
    named = re.search(r'name\s*:\s*"([^"]*)"', raw)
    positional = re.match(r'\s*"([^"]*)"', raw)
    if named:
        info["name"] = named.group(1)
    elif positional:
        info["name"] = positional.group(1)
    return info


def _parse_field(line: str) -> Optional[Dict[str, Any]]:
    m = _FIELD_RE.match(line)
    if not m:
        return None
    name, type_name, modifier, rest = m.groups()
    field: Dict[str, Any] = {
        "name": name,
        "type": type_name,
        "isList": modifier == "[]",
        # DMMF reports list fields as required
        "isRequired": modifier != "?",
        "isUnique": False,
        "isId": False,
        "isUpdatedAt": False,
        "hasDefaultValue": False,
        "default": None,
        "relation": None,
    }
    for attr, args in _parse_attributes(rest):
        if attr == "id":
            field["isId"] = True
        elif attr == "unique":
            field["isUnique"] = True
        elif attr == "updatedAt":
            field["isUpdatedAt"] = True
        elif attr == "default" and args is not None:
            field["hasDefaultValue"] = True
            field["default"] = _parse_default(args)
        elif attr == "relation":
            field["relation"] = _parse_relation(args)
    return field


def _parse_model(name: str, body: str) -> Tuple[List[Dict[str, Any]], List[str]]:
    fields = []
    primary_key: List[str] = []
    for raw_line in body.splitlines():
        line = _strip_comment(raw_line).strip()
        if not line:
            continue
        if line.startswith("@@"):
            for attr, args in _parse_attributes(line[1:]):
                if attr == "id" and args:
                    bracket = re.search(r"\[([^\]]*)\]", args)
                    if bracket:
                        primary_key = _split_names(bracket.group(1))
            continue
        field = _parse_field(line)
        if field is None:
            raise SchemaLoadError(f"Cannot parse field line in model '{name}': {raw_line.strip()}")
        fields.append(field)
    return fields, primary_key


def _parse_enum(body: str) -> List[str]:
    values = []
    for raw_line in body.splitlines():
        line = _strip_comment(raw_line).strip()
        if not line or line.startswith("@"):
            continue
        values.append(line.split()[0])
    return values


def parse_prisma_schema(text: str) -> SchemaIR:
    """
    Parse a Prisma datamodel into a SchemaIR.

    Args:
        text: Content of a ``schema.prisma`` file

    Returns:
        SchemaIR with one EntitySpec per model, in declaration order

    Raises:
        SchemaLoadError: If a field cannot be parsed or references an unknown type
    """
    raw_models: List[Tuple[str, List[Dict[str, Any]], List[str]]] = []
    enums: List[EnumSpec] = []

    for kind, name, body in _BLOCK_RE.findall(text):
        if kind == "model":
            fields, primary_key = _parse_model(name, body)
            raw_models.append((name, fields, primary_key))
        elif kind == "enum":
            enums.append(EnumSpec(name=name, values=_parse_enum(body)))

    model_names = {name for name, _, _ in raw_models}
    enum_names = {e.name for e in enums}

    entities = []
    for name, raw_fields, primary_key in raw_models:
        fk_names = set()
        for f in raw_fields:
            if f["relation"]:
                fk_names.update(f["relation"]["fields"])

        specs = []
        for f in raw_fields:
            type_name = f["type"]
            relation = f.pop("relation")
            if type_name in model_names:
                relation = relation or _parse_relation(None)
                f["kind"] = "object"
                f["relationName"] = relation["name"]
                f["relationFromFields"] = relation["fields"]
                f["relationToFields"] = relation["references"]
            elif type_name in enum_names:
                f["kind"] = "enum"
            elif type_name in BUILTIN_SCALARS:
                f["kind"] = "scalar"
            elif type_name.startswith("Unsupported("):
                f["kind"] = "unsupported"
            else:
                raise SchemaLoadError(
                    f"Field '{name}.{f['name']}' has unknown type '{type_name}'"
                )
            f["isReadOnly"] = f["name"] in fk_names
            specs.append(FieldSpec.model_validate(f))

        entities.append(EntitySpec(name=name, fields=specs, primary_key=primary_key))

    return SchemaIR(entities=entities, enums=enums)
