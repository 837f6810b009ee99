"""Reader for top-level Go declarations.

Only as much Go is understood as the interpreter needs: doc comments, type
declarations with their field lists, const/var specs with the spelling of
their initializers, and function names. Function bodies and initializer
expressions are skipped by bracket matching.
"""

import re
from pathlib import Path
from typing import NamedTuple

from loguru import logger

from gopenapi.errors import SourceParseError
from gopenapi.source.base import (
    Declaration,
    Field,
    FunctionDeclaration,
    MappingType,
    NamedType,
    OpaqueType,
    PointerType,
    QualifiedType,
    SequenceType,
    TypeDeclaration,
    TypeRef,
    ValueDeclaration,
    ValueSpec,
)

KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var",
})

# Keywords after which a newline ends the statement.
_TERMINATING_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_TERMINATING_OPS = frozenset({")", "]", "}", "++", "--"})
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_WORD_KINDS = frozenset({"ident", "keyword", "number", "string", "rune"})

_IDENT_RE = re.compile(r"[^\W\d]\w*")
_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F_]*(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9_]+)?i?"
    r"|0[oObB][0-9_]+i?"
    r"|(?:[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)(?:[eE][+-]?[0-9_]+)?i?"
)
_OP_RE = re.compile(r"\.\.\.|<-|:=|&&|\|\||<<=?|>>=?|&\^=?|\+\+|--|[-+*/%&|^<>=!]=?|[()\[\]{},;.:~]")
_ESCAPE_RE = re.compile(
    r"\\(?:(?P<simple>[abfnrtv\\'\"])|x(?P<hex>[0-9a-fA-F]{2})"
    r"|u(?P<u4>[0-9a-fA-F]{4})|U(?P<u8>[0-9a-fA-F]{8})|(?P<oct>[0-7]{3}))"
)
_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
    "\\": "\\", "'": "'", '"': '"',
}


class _Token(NamedTuple):
    kind: str  # ident / keyword / number / string / rune / op / ;
    text: str
    line: int


class _Comment(NamedTuple):
    text: str
    start: int
    end: int
    own_line: bool


def unquote(literal: str) -> str:
    """Decode a Go string or rune literal. Raises ValueError if it is not one."""
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1].replace("\r", "")
    if len(literal) < 2 or literal[0] != literal[-1] or literal[0] not in "\"'":
        raise ValueError(f"{literal} is not a quoted string literal")

    quote, body = literal[0], literal[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\n" or ch == quote:
            raise ValueError(f"invalid syntax in {literal}")
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        match = _ESCAPE_RE.match(body, i)
        if not match:
            raise ValueError(f"invalid escape sequence in {literal}")
        out.append(_decode_escape(match))
        i = match.end()

    value = "".join(out)
    if quote == "'" and len(value) != 1:
        raise ValueError(f"{literal} is not a single rune")
    return value


def _decode_escape(match: re.Match) -> str:
    if match.group("simple"):
        return _SIMPLE_ESCAPES[match.group("simple")]
    if match.group("oct"):
        return chr(int(match.group("oct"), 8))
    digits = match.group("hex") or match.group("u4") or match.group("u8")
    return chr(int(digits, 16))


def _join(tokens: list[_Token]) -> str:
    """Re-spell a token run, spacing only between adjacent words."""
    out = []
    prev = None
    for tok in tokens:
        if prev is not None and prev.kind in _WORD_KINDS and tok.kind in _WORD_KINDS:
            out.append(" ")
        out.append(tok.text)
        prev = tok
    return "".join(out)


def _receiver_type(tokens: list[_Token]) -> str:
    """Drop the receiver name from a method receiver list: ``s *server`` -> ``*server``."""
    if len(tokens) > 1 and tokens[0].kind == "ident" and tokens[1].text != "[":
        tokens = tokens[1:]
    return _join(tokens)


def _tokenize(source: str, filename: str) -> tuple[list[_Token], list[_Comment]]:
    """Split source into tokens and comments, inserting semicolons at line ends."""
    tokens: list[_Token] = []
    comments: list[_Comment] = []
    i, line, n = 0, 1, len(source)
    last_token_line = 0

    def ends_statement() -> bool:
        if not tokens:
            return False
        last = tokens[-1]
        if last.kind in ("ident", "number", "string", "rune"):
            return True
        if last.kind == "keyword":
            return last.text in _TERMINATING_KEYWORDS
        return last.kind == "op" and last.text in _TERMINATING_OPS

    while i < n:
        ch = source[i]
        if ch == "\n":
            if ends_statement():
                tokens.append(_Token(";", ";", line))
            line += 1
            i += 1
            continue
        if ch in " \t\r\f\ufeff":
            i += 1
            continue

        if source.startswith("//", i):
            end = source.find("\n", i)
            if end == -1:
                end = n
            comments.append(_Comment(source[i:end], line, line, last_token_line != line))
            i = end
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise SourceParseError(filename, "comment not terminated", line)
            text = source[i:end + 2]
            newlines = text.count("\n")
            comments.append(_Comment(text, line, line + newlines, last_token_line != line))
            if newlines and ends_statement():
                tokens.append(_Token(";", ";", line))
            line += newlines
            i = end + 2
            continue

        start_line = line
        if ch in "\"'":
            j = i + 1
            while j < n and source[j] not in (ch, "\n"):
                j += 2 if source[j] == "\\" else 1
            if j >= n or source[j] != ch:
                raise SourceParseError(filename, "literal not terminated", line)
            kind, text = ("string" if ch == '"' else "rune"), source[i:j + 1]
            i = j + 1
        elif ch == "`":
            j = source.find("`", i + 1)
            if j == -1:
                raise SourceParseError(filename, "raw string literal not terminated", line)
            kind, text = "string", source[i:j + 1]
            line += text.count("\n")
            i = j + 1
        else:
            match = _IDENT_RE.match(source, i)
            if match:
                kind = "keyword" if match.group() in KEYWORDS else "ident"
            else:
                match = _NUMBER_RE.match(source, i)
                kind = "number"
                if not match:
                    match = _OP_RE.match(source, i)
                    kind = "op"
                if not match:
                    raise SourceParseError(filename, f"unexpected character {ch!r}", line)
            text = match.group()
            i = match.end()
            if text == ";":
                kind = ";"

        tokens.append(_Token(kind, text, start_line))
        last_token_line = line

    if ends_statement():
        tokens.append(_Token(";", ";", line))
    return tokens, comments


def _comment_text(group: list[_Comment]) -> str:
    """Text of a comment group with comment markers removed."""
    lines = []
    for comment in group:
        if comment.text.startswith("//"):
            body = comment.text[2:]
            lines.append(body[1:] if body.startswith(" ") else body)
        else:
            lines.extend(comment.text[2:-2].split("\n"))

    out: list[str] = []
    for raw in lines:
        text = raw.rstrip()
        if text or (out and out[-1]):
            out.append(text)
    while out and not out[-1]:
        out.pop()
    return "\n".join(out) + "\n" if out else ""


def _doc_comments(comments: list[_Comment]) -> dict[int, str]:
    """Map the last line of every standalone comment group to its text."""
    docs: dict[int, str] = {}
    group: list[_Comment] = []

    for comment in comments:
        if group and (not comment.own_line or comment.start > group[-1].end + 1):
            docs[group[-1].end] = _comment_text(group)
            group = []
        if comment.own_line:
            group.append(comment)
    if group:
        docs[group[-1].end] = _comment_text(group)
    return docs


class _Parser:
    def __init__(self, tokens: list[_Token], docs: dict[int, str], filename: str):
        self.tokens = tokens
        self.docs = docs
        self.filename = filename
        self.pos = 0

    # -- token helpers -----------------------------------------------------

    def peek(self, offset: int = 0) -> _Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at(self, text: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok is not None and tok.text == text and tok.kind in ("op", ";", "keyword")

    def advance(self) -> _Token:
        tok = self.peek()
        if tok is None:
            raise self.error("unexpected end of file")
        self.pos += 1
        return tok

    def expect(self, text: str) -> _Token:
        if not self.at(text):
            raise self.error(f"expected {text!r}")
        return self.advance()

    def expect_ident(self) -> _Token:
        tok = self.peek()
        if tok is None or tok.kind != "ident":
            raise self.error("expected identifier")
        return self.advance()

    def error(self, message: str) -> SourceParseError:
        tok = self.peek()
        if tok is None:
            line = self.tokens[-1].line if self.tokens else None
            return SourceParseError(self.filename, message, line)
        shown = "newline" if tok.kind == ";" and tok.text == ";" else repr(tok.text)
        return SourceParseError(self.filename, f"{message}, found {shown}", tok.line)

    def skip_balanced(self) -> list[_Token]:
        """Consume a bracketed run starting at the current opener; return the inner tokens."""
        opener = self.advance()
        if opener.kind != "op" or opener.text not in _OPENERS:
            raise self.error("expected bracket")
        start = self.pos
        depth = 1
        while depth:
            tok = self.peek()
            if tok is None:
                raise SourceParseError(self.filename, f"unbalanced {opener.text!r}", opener.line)
            if tok.kind == "op":
                if tok.text in _OPENERS:
                    depth += 1
                elif tok.text in _CLOSERS:
                    depth -= 1
            self.pos += 1
        return self.tokens[start:self.pos - 1]

    def end_statement(self) -> None:
        if self.peek() is not None:
            self.expect(";")

    def doc_for(self, tok: _Token) -> str:
        return self.docs.get(tok.line - 1, "")

    # -- declarations ------------------------------------------------------

    def parse_file(self) -> list[Declaration]:
        declarations: list[Declaration] = []
        while self.peek() is not None:
            tok = self.peek()
            if tok.kind == ";":
                self.advance()
                continue
            if tok.kind != "keyword":
                raise self.error("expected declaration")
            match tok.text:
                case "package":
                    self.advance()
                    self.expect_ident()
                case "import":
                    self.advance()
                    if self.at("("):
                        self.skip_balanced()
                    else:
                        while self.peek() is not None and not self.at(";"):
                            self.advance()
                case "type":
                    declarations.extend(self.type_declaration())
                case "const" | "var":
                    declarations.append(self.value_declaration())
                case "func":
                    declarations.append(self.function_declaration())
                case _:
                    raise self.error("expected declaration")
            self.end_statement()
        return declarations

    def type_declaration(self) -> list[TypeDeclaration]:
        keyword = self.advance()
        doc = self.doc_for(keyword)
        if not self.at("("):
            return [self.type_spec(doc)]

        self.advance()
        specs = []
        while not self.at(")"):
            if self.at(";"):
                self.advance()
                continue
            specs.append(self.type_spec(self.doc_for(self.peek()), group_doc=doc))
            if not self.at(")"):
                self.expect(";")
        self.advance()
        return specs

    def type_spec(self, doc: str, group_doc: str = "") -> TypeDeclaration:
        name = self.expect_ident()
        if self.at("[") and self._at_type_parameters():
            self.skip_balanced()
        if self.at("="):
            self.advance()
        if self.at("struct") and self.at("{", 1):
            self.advance()
            fields = self.struct_fields()
            return TypeDeclaration(
                name=name.text, doc=doc, group_doc=group_doc, fields=tuple(fields), line=name.line
            )
        return TypeDeclaration(
            name=name.text, doc=doc, group_doc=group_doc, underlying=self.parse_type(), line=name.line
        )

    def _at_type_parameters(self) -> bool:
        first, second = self.peek(1), self.peek(2)
        return (
            first is not None and first.kind == "ident"
            and second is not None and not (second.kind == "op" and second.text == "]")
        )

    def struct_fields(self) -> list[Field]:
        self.expect("{")
        fields: list[Field] = []
        while not self.at("}"):
            if self.peek() is None:
                raise self.error("struct not terminated")
            if self.at(";"):
                self.advance()
                continue
            fields.extend(self.field_declaration())
            if not self.at("}"):
                self.expect(";")
        self.advance()
        return fields

    def field_declaration(self) -> list[Field]:
        tok, following = self.peek(), self.peek(1)
        embedded = self.at("*") or (
            tok.kind == "ident"
            and following is not None
            and (following.kind in (";", "string") or following.text in ("}", "."))
        )
        if embedded:
            type_ref = self.parse_type()
            base = type_ref
            while isinstance(base, PointerType):
                base = base.element
            name = base.name if isinstance(base, (NamedType, QualifiedType)) else str(base)
            return [Field(name=name, type=type_ref, tag=self.field_tag(), embedded=True)]

        names = [self.expect_ident().text]
        while self.at(","):
            self.advance()
            names.append(self.expect_ident().text)
        type_ref = self.parse_type()
        tag = self.field_tag()
        return [Field(name=name, type=type_ref, tag=tag) for name in names]

    def field_tag(self) -> str | None:
        tok = self.peek()
        if tok is None or tok.kind != "string":
            return None
        self.advance()
        try:
            return unquote(tok.text)
        except ValueError as e:
            raise SourceParseError(self.filename, f"bad struct tag: {e}", tok.line) from e

    def value_declaration(self) -> ValueDeclaration:
        keyword = self.advance()
        doc = self.doc_for(keyword)
        specs = []
        if self.at("("):
            self.advance()
            while not self.at(")"):
                if self.peek() is None:
                    raise self.error(f"{keyword.text} group not terminated")
                if self.at(";"):
                    self.advance()
                    continue
                specs.append(self.value_spec())
                if not self.at(")"):
                    self.expect(";")
            self.advance()
        else:
            specs.append(self.value_spec())
        return ValueDeclaration(keyword=keyword.text, doc=doc, specs=tuple(specs), line=keyword.line)

    def value_spec(self) -> ValueSpec:
        names = [self.expect_ident().text]
        while self.at(","):
            self.advance()
            names.append(self.expect_ident().text)
        if not (self.at("=") or self.at(";") or self.at(")")):
            self.parse_type()
        values: list[str] = []
        if self.at("="):
            self.advance()
            values = self.expression_list()
        return ValueSpec(names=tuple(names), values=tuple(values))

    def expression_list(self) -> list[str]:
        values: list[str] = []
        current: list[_Token] = []
        depth = 0
        while True:
            tok = self.peek()
            if tok is None:
                break
            if depth == 0 and (tok.kind == ";" or (tok.kind == "op" and tok.text == ")")):
                break
            if depth == 0 and tok.kind == "op" and tok.text == ",":
                values.append(_join(current))
                current = []
                self.advance()
                continue
            if tok.kind == "op" and tok.text in _OPENERS:
                depth += 1
            elif tok.kind == "op" and tok.text in _CLOSERS:
                depth -= 1
            current.append(self.advance())
        if current:
            values.append(_join(current))
        return values

    def function_declaration(self) -> FunctionDeclaration:
        keyword = self.advance()
        doc = self.doc_for(keyword)
        receiver = None
        if self.at("("):
            receiver = _receiver_type(self.skip_balanced())
        name = self.expect_ident()
        if self.at("["):
            self.skip_balanced()
        if not self.at("("):
            raise self.error("expected parameter list")
        self.skip_balanced()
        if self.at("("):
            self.skip_balanced()
        elif self._starts_type():
            self.parse_type()
        if self.at("{"):
            self.skip_balanced()
        return FunctionDeclaration(name=name.text, doc=doc, receiver=receiver, line=keyword.line)

    # -- types ---------------------------------------------------------------

    def _starts_type(self) -> bool:
        tok = self.peek()
        if tok is None:
            return False
        if tok.kind == "ident":
            return True
        if tok.kind == "keyword":
            return tok.text in ("map", "chan", "func", "interface", "struct")
        return tok.kind == "op" and tok.text in ("*", "(", "[", "<-")

    def parse_type(self) -> TypeRef:
        tok = self.peek()
        if tok is None:
            raise self.error("expected type")
        start = self.pos

        if tok.kind == "op":
            if tok.text == "*":
                self.advance()
                return PointerType(element=self.parse_type())
            if tok.text == "(":
                self.advance()
                inner = self.parse_type()
                self.expect(")")
                return inner
            if tok.text == "[":
                self.advance()
                length = None
                if not self.at("]"):
                    length_tokens = []
                    while not self.at("]"):
                        length_tokens.append(self.advance())
                    length = _join(length_tokens)
                self.expect("]")
                return SequenceType(element=self.parse_type(), length=length)
            if tok.text == "<-":
                self.advance()
                self.expect("chan")
                self.parse_type()
                return OpaqueType(text=_join(self.tokens[start:self.pos]))

        if tok.kind == "keyword":
            self.advance()
            if tok.text == "map":
                self.expect("[")
                key = self.parse_type()
                self.expect("]")
                return MappingType(key=key, value=self.parse_type())
            if tok.text == "chan":
                if self.at("<-"):
                    self.advance()
                self.parse_type()
            elif tok.text in ("interface", "struct"):
                self.skip_balanced()
            elif tok.text == "func":
                self.skip_balanced()
                if self.at("("):
                    self.skip_balanced()
                elif self._starts_type():
                    self.parse_type()
            else:
                self.pos = start
                raise self.error("expected type")
            return OpaqueType(text=_join(self.tokens[start:self.pos]))

        if tok.kind == "ident":
            self.advance()
            next_tok = self.peek(1)
            if self.at(".") and next_tok is not None and next_tok.kind == "ident":
                self.advance()
                ref: TypeRef = QualifiedType(package=tok.text, name=self.advance().text)
            else:
                ref = NamedType(name=tok.text)
            if self.at("["):
                self.skip_balanced()
                return OpaqueType(text=_join(self.tokens[start:self.pos]))
            return ref

        raise self.error("expected type")


def parse_go_source(source: str, filename: str = "<source>") -> list[Declaration]:
    """Read the top-level declarations of one Go source file."""
    tokens, comments = _tokenize(source, filename)
    return _Parser(tokens, _doc_comments(comments), filename).parse_file()


def read_declarations(path: Path) -> list[Declaration]:
    """Read and parse a Go file from disk."""
    try:
        source = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceParseError(str(path), str(e)) from e
    declarations = parse_go_source(source, str(path))
    logger.debug("Read {} declarations from {}", len(declarations), path)
    return declarations
