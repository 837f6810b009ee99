import pytest

from gopenapi.interpret.schema import (
    PRIMITIVE_TYPES,
    field_name,
    lower_first,
    schema_for_declaration,
    schema_for_type,
    tag_lookup,
)
from gopenapi.models.schema import ArraySchema, ObjectSchema, PrimitiveSchema, RefSchema
from gopenapi.source.base import (
    Field,
    MappingType,
    NamedType,
    OpaqueType,
    PointerType,
    QualifiedType,
    SequenceType,
    TypeDeclaration,
)

EXPECTED_TABLE = {
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


def _ref(text: str):
    if "." in text:
        package, name = text.split(".")
        return QualifiedType(package=package, name=name)
    return NamedType(name=text)


class TestTypeTable:
    def test_table_is_complete(self):
        assert PRIMITIVE_TYPES == EXPECTED_TABLE

    @pytest.mark.parametrize("go_type,expected", sorted(EXPECTED_TABLE.items()))
    def test_primitive(self, go_type, expected):
        schema = schema_for_type(_ref(go_type))
        assert isinstance(schema, PrimitiveSchema)
        assert (schema.type, schema.format) == expected

    @pytest.mark.parametrize("go_type,ref", [
        ("SubModel", "#/components/schemas/subModel"),
        ("uint8", "#/components/schemas/uint8"),
        ("URL", "#/components/schemas/uRL"),
        ("uuid.UUID", "#/components/schemas/uuid.UUID"),
    ])
    def test_unlisted_names_become_refs(self, go_type, ref):
        schema = schema_for_type(_ref(go_type))
        assert isinstance(schema, RefSchema)
        assert schema.ref == ref

    def test_sequence_of_pointers(self):
        schema = schema_for_type(SequenceType(element=PointerType(element=NamedType(name="SubModel"))))
        assert isinstance(schema, ArraySchema)
        assert schema.items.ref == "#/components/schemas/subModel"

    def test_map_of_pointers(self):
        schema = schema_for_type(
            MappingType(key=NamedType(name="string"), value=PointerType(element=NamedType(name="SubSubModel")))
        )
        assert isinstance(schema, ObjectSchema)
        assert schema.properties is None
        assert schema.additional_properties.ref == "#/components/schemas/subSubModel"

    def test_pointer_is_transparent(self):
        schema = schema_for_type(PointerType(element=QualifiedType(package="time", name="Time")))
        assert (schema.type, schema.format) == ("string", "date-time")

    def test_opaque_has_no_schema(self):
        assert schema_for_type(OpaqueType(text="interface{}")) is None
        assert schema_for_type(SequenceType(element=OpaqueType(text="func()"))) is None


class TestFieldNames:
    def test_lower_first(self):
        assert lower_first("IntField") == "intField"
        assert lower_first("ID") == "iD"
        assert lower_first("") == ""

    def test_tag_lookup(self):
        tag = 'db:"thing_id" json:"id,omitempty" xml:"-"'
        assert tag_lookup(tag, "json") == "id,omitempty"
        assert tag_lookup(tag, "xml") == "-"
        assert tag_lookup(tag, "yaml") is None

    @pytest.mark.parametrize("tag,expected", [
        ('json:"intField"', "intField"),
        ('json:"int_field,omitempty"', "int_field"),
        ('json:",omitempty"', "intField"),
        ('json:"-"', ""),
        ('db:"int_field"', "intField"),
        (None, "intField"),
    ])
    def test_field_name(self, tag, expected):
        field = Field(name="IntField", type=NamedType(name="int64"), tag=tag)
        assert field_name(field) == expected

    def test_embedded_field_needs_a_tag(self):
        embedded = Field(name="Base", type=NamedType(name="Base"), embedded=True)
        assert field_name(embedded) == ""
        tagged = Field(name="Base", type=NamedType(name="Base"), tag='json:"base"', embedded=True)
        assert field_name(tagged) == "base"


class TestDeclarationSchemas:
    def test_root_model(self):
        decl = TypeDeclaration(
            name="RootModel",
            fields=(
                Field(name="IntField", type=NamedType(name="int64"), tag='json:"intField"'),
                Field(
                    name="SubModels",
                    type=SequenceType(element=PointerType(element=NamedType(name="SubModel"))),
                    tag='json:"subModels"',
                ),
            ),
        )
        assert schema_for_declaration(decl).to_dict() == {
            "type": "object",
            "properties": {
                "intField": {"type": "integer", "format": "int64"},
                "subModels": {"type": "array", "items": {"$ref": "#/components/schemas/subModel"}},
            },
        }

    def test_omitted_and_opaque_fields_are_skipped(self):
        decl = TypeDeclaration(
            name="AliasedSub",
            fields=(
                Field(name="IgnoredField", type=NamedType(name="string"), tag='json:"-"'),
                Field(name="Callback", type=OpaqueType(text="func()")),
                Field(name="TimeField", type=QualifiedType(package="time", name="Time")),
            ),
        )
        schema = schema_for_declaration(decl)
        assert list(schema.properties) == ["timeField"]

    def test_sequence_alias(self):
        decl = TypeDeclaration(
            name="AliasedSubs",
            underlying=SequenceType(element=PointerType(element=NamedType(name="AliasedSub"))),
        )
        schema = schema_for_declaration(decl)
        assert isinstance(schema, ArraySchema)
        assert schema.items.ref == "#/components/schemas/aliasedSub"

    def test_named_underlying_type(self):
        schema = schema_for_declaration(TypeDeclaration(name="Status", underlying=NamedType(name="string")))
        assert schema.to_dict() == {"type": "string"}

    def test_opaque_underlying_type(self):
        schema = schema_for_declaration(TypeDeclaration(name="Handler", underlying=OpaqueType(text="func()")))
        assert schema.to_dict() == {"type": "object", "properties": {}}

    def test_empty_struct(self):
        schema = schema_for_declaration(TypeDeclaration(name="Empty", fields=()))
        assert schema.to_dict() == {"type": "object", "properties": {}}
