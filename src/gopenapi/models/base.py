"""Shared base for OpenAPI object models.

Field names follow Python conventions; the OpenAPI spelling is kept as the
alias and is what gets serialized.
"""

from pydantic import BaseModel, ConfigDict, Field


class OpenAPIModel(BaseModel):
    """Base model: accepts field names and aliases, ignores unknown keys.

    YAML bodies often use bare numbers as keys (response codes) or values
    (versions); they are read as strings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    def to_dict(self) -> dict:
        """Dump the model the way it appears in an OpenAPI document."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExternalDocumentation(OpenAPIModel):
    url: str = ""
    description: str | None = None


class XML(OpenAPIModel):
    name: str | None = None
    namespace: str | None = None
    prefix: str | None = None
    attribute: bool | None = None
    wrapped: bool | None = None


class Discriminator(OpenAPIModel):
    property_name: str = Field("", alias="propertyName")
    mapping: dict[str, str] | None = None
