"""Content type schema models for the Contentful Management API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SchemaField(BaseModel):
    """A single field definition of a content type."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    required: bool = False
    localized: bool = False
    disabled: bool = False
    omitted: bool = False


class ContentTypeSchema(BaseModel):
    """Content type definition fetched once per run."""

    model_config = ConfigDict(extra="allow")

    name: str
    fields: List[SchemaField] = Field(default_factory=list)
    sys: Dict[str, Any] = Field(default_factory=dict)

    @property
    def field_ids(self) -> List[str]:
        """Field ids in schema order."""
        return [field.id for field in self.fields]

    @property
    def required_field_ids(self) -> List[str]:
        """Ids of the fields marked as required, in schema order."""
        return [field.id for field in self.fields if field.required]
