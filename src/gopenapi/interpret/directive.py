"""Directive extraction.

A directive is a ``gopenapi:`` tag in the doc comment of a top-level
declaration. Functions carry ``info`` and ``path`` blocks, const/var
declarations carry ``parameter`` blocks, and type declarations are marked
with ``objectSchema`` (their shape is the payload).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from gopenapi.errors import LiteralDecodeError
from gopenapi.source.base import Declaration, FunctionDeclaration, TypeDeclaration, ValueDeclaration
from gopenapi.source.golang import unquote

INFO_TAG = "gopenapi:info"
PATH_TAG = "gopenapi:path"
PARAMETER_TAG = "gopenapi:parameter"
OBJECT_SCHEMA_TAG = "gopenapi:objectSchema"


class DirectiveKind(str, Enum):
    INFO = "info"
    PATH = "path"
    PARAMETER = "parameter"
    OBJECT_SCHEMA = "objectSchema"


FUNCTION_TAGS = {
    INFO_TAG: DirectiveKind.INFO,
    PATH_TAG: DirectiveKind.PATH,
}


class Directive(BaseModel):
    """A recognized directive, ready for the assembler.

    ``body`` is the YAML text after the tag, ``comment`` the cleaned doc
    comment it came from. ``name`` is the component key for parameters and
    schemas; ``parameter_name`` is the unquoted literal of a parameter.
    """

    model_config = ConfigDict(frozen=True)

    kind: DirectiveKind
    declaration: Declaration
    name: str | None = None
    body: str = ""
    comment: str = ""
    parameter_name: str | None = None


def clean_comment(text: str) -> str:
    """Trim a doc comment and expand tabs so the YAML body indents consistently."""
    return text.strip().replace("\t", "    ")


def extract_directive(declaration: Declaration) -> Directive | None:
    """Return the directive carried by ``declaration``, or None if it has none."""
    match declaration:
        case FunctionDeclaration():
            return _function_directive(declaration)
        case TypeDeclaration():
            return _type_directive(declaration)
        case ValueDeclaration():
            return _value_directive(declaration)
    return None


def _function_directive(declaration: FunctionDeclaration) -> Directive | None:
    comment = clean_comment(declaration.doc)
    for tag, kind in FUNCTION_TAGS.items():
        if comment.startswith(tag):
            return Directive(
                kind=kind,
                declaration=declaration,
                body=comment[len(tag):],
                comment=comment,
            )
    return None


def _type_directive(declaration: TypeDeclaration) -> Directive | None:
    # The tag may sit anywhere in the doc block, or in the comment of the enclosing group.
    doc = "\n".join(text for text in (declaration.group_doc, declaration.doc) if text)
    if OBJECT_SCHEMA_TAG not in doc:
        return None
    return Directive(
        kind=DirectiveKind.OBJECT_SCHEMA,
        declaration=declaration,
        name=declaration.name,
        comment=clean_comment(doc),
    )


def _value_directive(declaration: ValueDeclaration) -> Directive | None:
    comment = clean_comment(declaration.doc)
    if not comment.startswith(PARAMETER_TAG):
        return None

    names = [name for spec in declaration.specs for name in spec.names]
    values = [value for spec in declaration.specs for value in spec.values]
    if len(declaration.specs) != 1 or len(names) != 1 or len(values) != 1:
        raise LiteralDecodeError(
            ", ".join(names) or declaration.keyword,
            ", ".join(values) or None,
            "a parameter directive needs exactly one name bound to exactly one string literal",
        )

    name, literal = names[0], values[0]
    try:
        parameter_name = unquote(literal)
    except ValueError as e:
        raise LiteralDecodeError(name, literal, str(e)) from e

    return Directive(
        kind=DirectiveKind.PARAMETER,
        declaration=declaration,
        name=name,
        body=comment[len(PARAMETER_TAG):],
        comment=comment,
        parameter_name=parameter_name,
    )
