"""OpenAPI 3 document model.

The generator builds one ``Document`` per run. Directive bodies are decoded
straight onto these models, so they follow the OpenAPI field spelling via
aliases.
"""

from typing import Any

from pydantic import Field

from .base import ExternalDocumentation, OpenAPIModel
from .schema import Schema

OPENAPI_VERSION = "3.0.2"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

SecurityRequirement = dict[str, list[str]]


class Contact(OpenAPIModel):
    name: str | None = None
    url: str | None = None
    email: str | None = None


class License(OpenAPIModel):
    name: str = ""
    url: str | None = None


class Info(OpenAPIModel):
    """The ``info`` block of the document."""

    title: str = ""
    description: str | None = None
    terms_of_service: str | None = Field(None, alias="termsOfService")
    contact: Contact | None = None
    license: License | None = None
    version: str = ""


class ServerVariable(OpenAPIModel):
    enum: list[str] | None = None
    default: str = ""
    description: str | None = None


class Server(OpenAPIModel):
    url: str = ""
    description: str | None = None
    variables: dict[str, ServerVariable] | None = None


class Example(OpenAPIModel):
    summary: str | None = None
    description: str | None = None
    value: Any = None
    external_value: str | None = Field(None, alias="externalValue")


class Header(OpenAPIModel):
    description: str | None = None
    required: bool = False
    deprecated: bool | None = None
    allow_empty_value: bool | None = Field(None, alias="allowEmptyValue")
    style: str | None = None
    explode: bool | None = None
    allow_reserved: bool | None = Field(None, alias="allowReserved")
    schema_: Schema | None = Field(None, alias="schema")
    example: Any = None
    examples: dict[str, Example] | None = None
    content: dict[str, "MediaType"] | None = None


class Encoding(OpenAPIModel):
    content_type: str | None = Field(None, alias="contentType")
    headers: dict[str, Header] | None = None
    style: str | None = None
    explode: bool | None = None
    allow_reserved: bool | None = Field(None, alias="allowReserved")


class MediaType(OpenAPIModel):
    schema_: Schema | None = Field(None, alias="schema")
    example: Any = None
    examples: dict[str, Example] | None = None
    encoding: dict[str, Encoding] | None = None


class Parameter(OpenAPIModel):
    """A path, query, header or cookie parameter."""

    name: str = ""
    location: str = Field("", alias="in")
    description: str | None = None
    required: bool = False
    deprecated: bool | None = None
    allow_empty_value: bool | None = Field(None, alias="allowEmptyValue")
    style: str | None = None
    explode: bool | None = None
    allow_reserved: bool | None = Field(None, alias="allowReserved")
    schema_: Schema | None = Field(None, alias="schema")
    example: Any = None
    examples: dict[str, Example] | None = None
    content: dict[str, MediaType] | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Identity of a parameter within a path item: (name, location)."""
        return self.name, self.location


class RequestBody(OpenAPIModel):
    description: str | None = None
    content: dict[str, MediaType] = Field(default_factory=dict)
    required: bool | None = None


class Link(OpenAPIModel):
    operation_ref: str | None = Field(None, alias="operationRef")
    operation_id: str | None = Field(None, alias="operationId")
    parameters: dict[str, Any] | None = None
    request_body: Any = Field(None, alias="requestBody")
    description: str | None = None
    server: Server | None = None


class Response(OpenAPIModel):
    ref: str | None = Field(None, alias="$ref")
    description: str | None = None
    headers: dict[str, Header] | None = None
    content: dict[str, MediaType] | None = None
    links: dict[str, Link] | None = None


class Operation(OpenAPIModel):
    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    external_docs: ExternalDocumentation | None = Field(None, alias="externalDocs")
    operation_id: str | None = Field(None, alias="operationId")
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(None, alias="requestBody")
    responses: dict[str, Response] = Field(default_factory=dict)
    callbacks: dict[str, dict[str, "PathItem"]] | None = None
    deprecated: bool | None = None
    security: list[SecurityRequirement] | None = None
    servers: list[Server] | None = None


class PathItem(OpenAPIModel):
    """Operations and shared metadata of one URL path."""

    ref: str | None = Field(None, alias="$ref")
    summary: str | None = None
    description: str | None = None
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None
    trace: Operation | None = None
    servers: list[Server] | None = None
    parameters: list[Parameter] | None = None

    def merge(self, other: "PathItem") -> None:
        """Merge another description of the same path into this one.

        Non-empty scalars and present operations from ``other`` win. Servers
        are appended. Parameters are appended unless one with the same
        (name, location) was already seen.
        """
        for attr in ("ref", "summary", "description"):
            value = getattr(other, attr)
            if value:
                setattr(self, attr, value)

        for method in HTTP_METHODS:
            operation = getattr(other, method)
            if operation is not None:
                setattr(self, method, operation)

        if other.servers:
            self.servers = (self.servers or []) + list(other.servers)

        if other.parameters:
            merged = list(self.parameters or [])
            seen = {p.key for p in merged}
            for param in other.parameters:
                if param.key in seen:
                    continue
                seen.add(param.key)
                merged.append(param)
            self.parameters = merged


class OAuthFlow(OpenAPIModel):
    authorization_url: str | None = Field(None, alias="authorizationUrl")
    token_url: str | None = Field(None, alias="tokenUrl")
    refresh_url: str | None = Field(None, alias="refreshUrl")
    scopes: dict[str, str] = Field(default_factory=dict)


class OAuthFlows(OpenAPIModel):
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = Field(None, alias="clientCredentials")
    authorization_code: OAuthFlow | None = Field(None, alias="authorizationCode")


class SecurityScheme(OpenAPIModel):
    type: str = ""
    description: str | None = None
    name: str | None = None
    location: str | None = Field(None, alias="in")
    scheme: str | None = None
    bearer_format: str | None = Field(None, alias="bearerFormat")
    flows: OAuthFlows | None = None
    open_id_connect_url: str | None = Field(None, alias="openIdConnectUrl")


class Tag(OpenAPIModel):
    name: str = ""
    description: str | None = None
    external_docs: ExternalDocumentation | None = Field(None, alias="externalDocs")


class Components(OpenAPIModel):
    schemas: dict[str, Schema] | None = None
    responses: dict[str, Response] | None = None
    parameters: dict[str, Parameter] | None = None
    examples: dict[str, Example] | None = None
    request_bodies: dict[str, RequestBody] | None = Field(None, alias="requestBodies")
    headers: dict[str, Header] | None = None
    security_schemes: dict[str, SecurityScheme] | None = Field(None, alias="securitySchemes")
    links: dict[str, Link] | None = None
    callbacks: dict[str, dict[str, PathItem]] | None = None


class Document(OpenAPIModel):
    """Root of an OpenAPI document."""

    openapi: str = OPENAPI_VERSION
    info: Info | None = None
    servers: list[Server] | None = None
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)
    security: list[SecurityRequirement] | None = None
    tags: list[Tag] | None = None
    external_docs: ExternalDocumentation | None = Field(None, alias="externalDocs")

    def merge_paths(self, items: dict[str, PathItem]) -> None:
        """Add path items, merging into any path that is already documented."""
        for path, item in items.items():
            existing = self.paths.get(path)
            if existing is None:
                self.paths[path] = item
            else:
                existing.merge(item)


for _model in (Header, Encoding, MediaType, Parameter, Response, Operation, PathItem, Components, Document):
    _model.model_rebuild()
