"""Document assembly: decode directives and merge them into one document."""

from typing import Any

import yaml
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from gopenapi.errors import DirectiveDecodeError
from gopenapi.interpret.directive import Directive, DirectiveKind, extract_directive
from gopenapi.interpret.schema import lower_first, schema_for_declaration
from gopenapi.models.document import Document, Info, Parameter, PathItem
from gopenapi.source.base import Declaration

_PATHS = TypeAdapter(dict[str, PathItem])


def decode_body(directive: Directive) -> Any:
    """Parse the YAML body of a directive. Empty bodies are rejected."""
    try:
        data = yaml.safe_load(directive.body)
    except yaml.YAMLError as e:
        raise DirectiveDecodeError(directive.comment, e) from e
    if data is None:
        raise DirectiveDecodeError(directive.comment, f"{directive.kind.value} directive has no body")
    return data


class DocumentAssembler:
    """Owns the document of one generation run.

    Info and schemas are last-wins; path items are merged field by field so
    several files can document different operations of the same path.
    """

    def __init__(self, document: Document | None = None):
        self.document = document or Document()

    def add_declarations(self, declarations: list[Declaration]) -> None:
        for declaration in declarations:
            directive = extract_directive(declaration)
            if directive is not None:
                self.apply(directive)

    def apply(self, directive: Directive) -> None:
        logger.debug("Applying {} directive from line {}", directive.kind.value, directive.declaration.line)
        match directive.kind:
            case DirectiveKind.INFO:
                self._apply_info(directive)
            case DirectiveKind.PATH:
                self._apply_path(directive)
            case DirectiveKind.PARAMETER:
                self._apply_parameter(directive)
            case DirectiveKind.OBJECT_SCHEMA:
                self._apply_object_schema(directive)

    def _apply_info(self, directive: Directive) -> None:
        data = decode_body(directive)
        try:
            self.document.info = Info.model_validate(data)
        except ValidationError as e:
            raise DirectiveDecodeError(directive.comment, e) from e

    def _apply_path(self, directive: Directive) -> None:
        data = decode_body(directive)
        try:
            items = _PATHS.validate_python(data)
        except ValidationError as e:
            raise DirectiveDecodeError(directive.comment, e) from e
        self.document.merge_paths(items)

    def _apply_parameter(self, directive: Directive) -> None:
        data = decode_body(directive)
        if not isinstance(data, dict):
            raise DirectiveDecodeError(directive.comment, "parameter directive body must be a mapping")
        try:
            parameter = Parameter.model_validate({"name": directive.parameter_name, **data})
        except ValidationError as e:
            raise DirectiveDecodeError(directive.comment, e) from e

        components = self.document.components
        if components.parameters is None:
            components.parameters = {}
        components.parameters[directive.name] = parameter

    def _apply_object_schema(self, directive: Directive) -> None:
        declaration = directive.declaration
        components = self.document.components
        if components.schemas is None:
            components.schemas = {}
        components.schemas[lower_first(declaration.name)] = schema_for_declaration(declaration)
