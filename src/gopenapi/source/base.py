"""Top-level Go declarations as seen by the interpreter.

The reader in ``gopenapi.source.golang`` turns a source file into these
models. Each declaration kind carries only what the interpreter needs.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class SourceModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class NamedType(SourceModel):
    """A bare identifier such as ``int64`` or ``SubModel``."""

    name: str

    def __str__(self) -> str:
        return self.name


class QualifiedType(SourceModel):
    """A package-qualified identifier such as ``time.Time``."""

    package: str
    name: str

    def __str__(self) -> str:
        return f"{self.package}.{self.name}"


class PointerType(SourceModel):
    element: "TypeRef"

    def __str__(self) -> str:
        return f"*{self.element}"


class SequenceType(SourceModel):
    """A slice (``[]T``) or fixed-size array (``[N]T``)."""

    element: "TypeRef"
    length: str | None = None

    def __str__(self) -> str:
        return f"[{self.length or ''}]{self.element}"


class MappingType(SourceModel):
    key: "TypeRef"
    value: "TypeRef"

    def __str__(self) -> str:
        return f"map[{self.key}]{self.value}"


class OpaqueType(SourceModel):
    """Any type expression the interpreter has no schema for (interface, func, chan, inline struct)."""

    text: str

    def __str__(self) -> str:
        return self.text


TypeRef = Union[NamedType, QualifiedType, PointerType, SequenceType, MappingType, OpaqueType]

for _model in (PointerType, SequenceType, MappingType):
    _model.model_rebuild()


class Field(SourceModel):
    """One struct field. ``tag`` is the struct tag without backquotes.

    Embedded fields are named after their type and flagged ``embedded``.
    """

    name: str
    type: TypeRef
    tag: str | None = None
    embedded: bool = False


class TypeDeclaration(SourceModel):
    """``type Name struct {...}`` (``fields`` set) or ``type Name T`` (``underlying`` set).

    Specs inside a ``type ( ... )`` group also carry the group comment in
    ``group_doc``.
    """

    name: str
    doc: str = ""
    group_doc: str = ""
    fields: tuple[Field, ...] | None = None
    underlying: TypeRef | None = None
    line: int = 0


class ValueSpec(SourceModel):
    """One ``A, B = x, y`` line; ``values`` keeps the raw literal spelling."""

    names: tuple[str, ...]
    values: tuple[str, ...] = ()


class ValueDeclaration(SourceModel):
    """A ``const`` or ``var`` declaration, possibly a parenthesised group."""

    keyword: Literal["const", "var"]
    doc: str = ""
    specs: tuple[ValueSpec, ...] = ()
    line: int = 0


class FunctionDeclaration(SourceModel):
    """``func Name(...)``; ``receiver`` is the receiver type of a method, e.g. ``*server``."""

    name: str
    doc: str = ""
    receiver: str | None = None
    line: int = 0


Declaration = Union[TypeDeclaration, ValueDeclaration, FunctionDeclaration]
