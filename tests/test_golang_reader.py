from pathlib import Path

import pytest

from gopenapi.errors import SourceParseError
from gopenapi.source.base import (
    FunctionDeclaration,
    MappingType,
    NamedType,
    OpaqueType,
    PointerType,
    QualifiedType,
    SequenceType,
    TypeDeclaration,
    ValueDeclaration,
)
from gopenapi.source.golang import parse_go_source, read_declarations, unquote

FIXTURES = Path(__file__).parent / "fixtures"


def _by_name(declarations):
    return {d.name: d for d in declarations if not isinstance(d, ValueDeclaration)}


class TestUnquote:
    def test_interpreted_string(self):
        assert unquote('"constParamName"') == "constParamName"

    def test_escapes(self):
        assert unquote(r'"a\tb\n\"c\" \u00e9 \x41 \101"') == 'a\tb\n"c" é A A'

    def test_raw_string(self):
        assert unquote("`C:\\path\\n`") == "C:\\path\\n"

    def test_rune(self):
        assert unquote("'x'") == "x"

    @pytest.mark.parametrize("literal", ["42", "constName", '"unterminated', r'"bad \q escape"', "'xy'"])
    def test_rejects_non_strings(self, literal):
        with pytest.raises(ValueError):
            unquote(literal)


class TestDocComments:
    def test_line_comment_group(self):
        source = "package p\n\n// First line.\n//\n//  Indented.\ntype A int\n"
        (decl,) = parse_go_source(source)
        assert decl.doc == "First line.\n\n Indented.\n"

    def test_block_comment(self):
        source = "package p\n\n/*\ngopenapi:info\ntitle: x\n*/\nfunc main() {}\n"
        (decl,) = parse_go_source(source)
        assert decl.doc == "gopenapi:info\ntitle: x\n"

    def test_blank_line_detaches_comment(self):
        source = "package p\n\n// Not attached.\n\nfunc f() {}\n"
        (decl,) = parse_go_source(source)
        assert decl.doc == ""

    def test_trailing_comment_is_not_doc(self):
        source = "package p\n\nvar x = 1 // trailing\nfunc f() {}\n"
        decls = parse_go_source(source)
        assert decls[1].doc == ""

    def test_tabs_kept(self):
        source = "package p\n\n/*\ncontact:\n\tname: x\n*/\nfunc f() {}\n"
        (decl,) = parse_go_source(source)
        assert decl.doc == "contact:\n\tname: x\n"


class TestTypeDeclarations:
    def test_struct_fixture(self):
        decls = _by_name(read_declarations(FIXTURES / "structs_with_models.go"))

        root = decls["RootModel"]
        assert isinstance(root, TypeDeclaration)
        assert root.doc == "gopenapi:objectSchema\n"
        assert [f.name for f in root.fields] == ["IntField", "StringField", "SubModels"]
        assert root.fields[0].type == NamedType(name="int64")
        assert root.fields[0].tag == 'json:"intField"'
        assert root.fields[2].type == SequenceType(element=PointerType(element=NamedType(name="SubModel")))

        sub = decls["SubModel"]
        assert sub.fields[1].type == MappingType(
            key=NamedType(name="string"),
            value=PointerType(element=NamedType(name="SubSubModel")),
        )

        assert decls["IgnoredModel"].doc == ""
        assert decls["IgnoredModel"].fields == ()

        aliased = decls["AliasedSubs"]
        assert aliased.fields is None
        assert aliased.underlying == SequenceType(element=PointerType(element=NamedType(name="AliasedSub")))

        time_field = decls["AliasedSub"].fields[1]
        assert time_field.type == QualifiedType(package="time", name="Time")
        assert time_field.tag is None

    def test_multiple_names_and_embedded_fields(self):
        source = (
            "package p\n\n"
            "type A struct {\n"
            "\tBase\n"
            "\t*pkg.Other `json:\"other\"`\n"
            "\tX, Y float32\n"
            "\tFn func(int) error\n"
            "\tAny interface{}\n"
            "\tArr [4]string\n"
            "}\n"
        )
        (decl,) = parse_go_source(source)
        fields = {f.name: f for f in decl.fields}
        assert fields["Base"].embedded is True
        assert fields["Other"].embedded is True
        assert fields["Other"].tag == 'json:"other"'
        assert fields["X"].type == fields["Y"].type == NamedType(name="float32")
        assert isinstance(fields["Fn"].type, OpaqueType)
        assert fields["Any"].type == OpaqueType(text="interface{}")
        assert fields["Arr"].type == SequenceType(element=NamedType(name="string"), length="4")

    def test_grouped_types_keep_group_doc(self):
        source = (
            "package p\n\n"
            "//gopenapi:objectSchema\n"
            "type (\n"
            "\tA struct{ ID int }\n"
            "\t// Own doc.\n"
            "\tB []string\n"
            ")\n"
        )
        a, b = parse_go_source(source)
        assert a.doc == ""
        assert a.group_doc == "gopenapi:objectSchema\n"
        assert b.doc == "Own doc.\n"
        assert b.group_doc == "gopenapi:objectSchema\n"

    def test_single_type_has_no_group_doc(self):
        (decl,) = parse_go_source("package p\n\n// Doc.\ntype A int\n")
        assert decl.doc == "Doc.\n"
        assert decl.group_doc == ""

    def test_generic_type(self):
        source = "package p\n\ntype Page[T any] struct {\n\tItems []T `json:\"items\"`\n}\n"
        (decl,) = parse_go_source(source)
        assert decl.name == "Page"
        assert decl.fields[0].type == SequenceType(element=NamedType(name="T"))


class TestValueDeclarations:
    def test_parameter_fixture(self):
        const, var = read_declarations(FIXTURES / "func_with_parameter.go")
        assert const.keyword == "const"
        assert const.specs[0].names == ("ConstParamName",)
        assert const.specs[0].values == ('"constParamName"',)
        assert const.doc.startswith("gopenapi:parameter\nin: path\n")
        assert var.keyword == "var"
        assert var.specs[0].values == ('"varParamName"',)

    def test_group_and_multiple_values(self):
        source = (
            "package p\n\n"
            "const (\n"
            "\tA Kind = iota\n"
            "\tB\n"
            "\tC, D = \"c\", f(1, 2)\n"
            ")\n"
            "var m = map[string]int{\"a\": 1, \"b\": 2}\n"
        )
        group, single = parse_go_source(source)
        assert [spec.names for spec in group.specs] == [("A",), ("B",), ("C", "D")]
        assert group.specs[1].values == ()
        assert group.specs[2].values == ('"c"', "f(1,2)")
        assert len(single.specs[0].values) == 1


class TestFunctionDeclarations:
    def test_methods_and_bodies(self):
        source = (
            "package p\n\n"
            "import (\n\t\"fmt\"\n)\n\n"
            "// Plain doc.\n"
            "func (s *server) handle(w Writer) (int, error) {\n"
            "\tif x := `}`; x != \"{\" {\n\t\tfmt.Println('}')\n\t}\n"
            "\treturn 0, nil\n"
            "}\n\n"
            "func typed() interface{ M() } { return nil }\n"
            "func external(int) string\n"
        )
        handle, typed, external = parse_go_source(source)
        assert isinstance(handle, FunctionDeclaration)
        assert handle.name == "handle"
        assert handle.receiver == "*server"
        assert handle.doc == "Plain doc.\n"
        assert typed.name == "typed"
        assert external.name == "external"

    @pytest.mark.parametrize("receiver,expected", [
        ("s *server", "*server"),
        ("*server", "*server"),
        ("server", "server"),
        ("p Page[T]", "Page[T]"),
        ("Page[T]", "Page[T]"),
    ])
    def test_receiver_type(self, receiver, expected):
        (decl,) = parse_go_source(f"package p\n\nfunc ({receiver}) m() {{}}\n")
        assert decl.receiver == expected

    def test_plain_function_has_no_receiver(self):
        (decl,) = parse_go_source("package p\n\nfunc f() {}\n")
        assert decl.receiver is None

    def test_path_fixture(self):
        decls = _by_name(read_declarations(FIXTURES / "func_with_path.go"))
        assert decls["ping"].doc.startswith("gopenapi:path\n/ping:\n")
        assert decls["ignored"].doc.startswith("Ping answers")


class TestParseErrors:
    def test_unbalanced_body(self):
        with pytest.raises(SourceParseError) as exc_info:
            parse_go_source("package p\n\nfunc f() {\n", "broken.go")
        assert exc_info.value.path == "broken.go"
        assert "broken.go" in str(exc_info.value)

    def test_unterminated_comment(self):
        with pytest.raises(SourceParseError, match="comment not terminated"):
            parse_go_source("package p\n/* open\n", "broken.go")

    def test_statement_at_top_level(self):
        with pytest.raises(SourceParseError, match="expected declaration"):
            parse_go_source("package p\n\nx := 1\n", "broken.go")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceParseError):
            read_declarations(tmp_path / "missing.go")
