"""Schema object as a tagged variant.

A schema node is exactly one of: a ``$ref`` pointer, a primitive
(type + format), an object with properties, or an array with items. Decoding
picks the variant from the shape of the incoming mapping.
"""

from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import Discriminator as UnionDiscriminator
from pydantic import Field, Tag

from .base import XML, Discriminator, ExternalDocumentation, OpenAPIModel

SCHEMA_REF_PREFIX = "#/components/schemas/"


class RefSchema(OpenAPIModel):
    """Pointer to a named component schema. Carries nothing else."""

    kind: ClassVar[str] = "ref"

    ref: str = Field(alias="$ref")


class SchemaBase(OpenAPIModel):
    """Descriptive fields shared by every non-reference schema."""

    title: str | None = None
    description: str | None = None
    nullable: bool | None = None
    read_only: bool | None = Field(None, alias="readOnly")
    write_only: bool | None = Field(None, alias="writeOnly")
    deprecated: bool | None = None
    example: Any = None
    default: Any = None
    enum: list[Any] | None = None
    discriminator: Discriminator | None = None
    xml: XML | None = None
    external_docs: ExternalDocumentation | None = Field(None, alias="externalDocs")
    all_of: list["Schema"] | None = Field(None, alias="allOf")
    one_of: list["Schema"] | None = Field(None, alias="oneOf")
    any_of: list["Schema"] | None = Field(None, alias="anyOf")
    not_: Optional["Schema"] = Field(None, alias="not")


class PrimitiveSchema(SchemaBase):
    kind: ClassVar[str] = "primitive"

    type: str | None = None
    format: str | None = None


class ObjectSchema(SchemaBase):
    kind: ClassVar[str] = "object"

    type: Literal["object"] = "object"
    properties: dict[str, "Schema"] | None = None
    additional_properties: Union["Schema", bool, None] = Field(None, alias="additionalProperties")
    required: list[str] | None = None


class ArraySchema(SchemaBase):
    kind: ClassVar[str] = "array"

    type: Literal["array"] = "array"
    items: "Schema"


def _schema_kind(value: Any) -> str:
    """Pick the variant for raw mappings during decoding and for models when dumping."""
    if not isinstance(value, dict):
        return getattr(value, "kind", "primitive")
    if "$ref" in value or "ref" in value:
        return "ref"
    declared = value.get("type")
    if declared == "array":
        return "array"
    if declared == "object" or "properties" in value or "additionalProperties" in value:
        return "object"
    return "primitive"


Schema = Annotated[
    Union[
        Annotated[RefSchema, Tag("ref")],
        Annotated[ObjectSchema, Tag("object")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[PrimitiveSchema, Tag("primitive")],
    ],
    UnionDiscriminator(_schema_kind),
]

for _model in (SchemaBase, PrimitiveSchema, ObjectSchema, ArraySchema):
    _model.model_rebuild()


def schema_ref(name: str) -> RefSchema:
    """Build a reference to ``#/components/schemas/<name>``."""
    return RefSchema(ref=SCHEMA_REF_PREFIX + name)
