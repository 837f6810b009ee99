"""Go type to schema mapping."""

import re

from loguru import logger

from gopenapi.models.schema import ArraySchema, ObjectSchema, PrimitiveSchema, Schema, schema_ref
from gopenapi.source.base import (
    Field,
    MappingType,
    NamedType,
    PointerType,
    QualifiedType,
    SequenceType,
    TypeDeclaration,
    TypeRef,
)
from gopenapi.source.golang import unquote

# Go type name -> (schema type, format)
PRIMITIVE_TYPES: dict[str, tuple[str, str | None]] = {
    "bool": ("boolean", None),
    "int64": ("integer", "int64"),
    "int": ("integer", "int64"),
    "int32": ("integer", "int32"),
    "time.Month": ("integer", "int32"),
    "float64": ("number", "double"),
    "float": ("number", "double"),
    "float32": ("number", "float"),
    "string": ("string", None),
    "time.Time": ("string", "date-time"),
}

JSON_TAG_KEY = "json"
OMIT_SENTINEL = "-"

_TAG_PAIR_RE = re.compile(r'\s*([^\s:"]+):("(?:[^"\\]|\\.)*")')


def lower_first(name: str) -> str:
    """Lower-case only the first character: ``SubModel`` -> ``subModel``."""
    return name[:1].lower() + name[1:]


def tag_lookup(tag: str, key: str) -> str | None:
    """Value of ``key`` in a struct tag such as ``json:"id,omitempty" db:"id"``."""
    tag = tag.strip()
    pos = 0
    while pos < len(tag):
        match = _TAG_PAIR_RE.match(tag, pos)
        if not match:
            return None
        if match.group(1) == key:
            try:
                return unquote(match.group(2))
            except ValueError:
                return None
        pos = match.end()
    return None


def field_name(field: Field) -> str:
    """Serialized name of a struct field; empty when the field is left out."""
    options = tag_lookup(field.tag, JSON_TAG_KEY) if field.tag else None
    if options == OMIT_SENTINEL:
        return ""
    name = (options or "").split(",")[0]
    if name:
        return name
    if field.embedded:
        return ""
    return lower_first(field.name)


def type_name_schema(name: str) -> Schema:
    """Schema for a (possibly package-qualified) type name.

    Names outside the primitive table become references to the component
    schema of the same name.
    """
    if name in PRIMITIVE_TYPES:
        schema_type, schema_format = PRIMITIVE_TYPES[name]
        return PrimitiveSchema(type=schema_type, format=schema_format)
    return schema_ref(lower_first(name))


def schema_for_type(ref: TypeRef) -> Schema | None:
    """Map a type reference to a schema. Returns None for types with no schema."""
    match ref:
        case NamedType(name=name):
            return type_name_schema(name)
        case QualifiedType():
            return type_name_schema(str(ref))
        case PointerType(element=element):
            return schema_for_type(element)
        case SequenceType(element=element):
            items = schema_for_type(element)
            return ArraySchema(items=items) if items is not None else None
        case MappingType(value=value):
            values = schema_for_type(value)
            return ObjectSchema(additional_properties=values) if values is not None else None
    return None


def schema_for_declaration(declaration: TypeDeclaration) -> Schema:
    """Derive the component schema of a type declaration from its shape."""
    if declaration.fields is None:
        schema = schema_for_type(declaration.underlying) if declaration.underlying else None
        if schema is None:
            logger.warning("No schema for type {} ({}), using an empty object", declaration.name, declaration.underlying)
            return ObjectSchema(properties={})
        return schema

    properties: dict[str, Schema] = {}
    for field in declaration.fields:
        name = field_name(field)
        if not name:
            if field.embedded:
                logger.debug("Skipping embedded field {} of {}", field.name, declaration.name)
            continue
        schema = schema_for_type(field.type)
        if schema is None:
            logger.warning("Skipping field {}.{}: no schema for type {}", declaration.name, field.name, field.type)
            continue
        properties[name] = schema
    return ObjectSchema(properties=properties)
