"""Models for local documents and the entries built from them."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceFile(BaseModel):
    """Raw text of one input file."""

    model_config = ConfigDict(frozen=True)

    path: str
    raw_content: str


class ParsedDocument(BaseModel):
    """Front-matter metadata and body text of one input file."""

    path: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    body: str = ""


class MappedEntry(BaseModel):
    """Entry fields keyed by field id, then by locale."""

    path: str
    fields: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Ensure every field id is a non-empty string."""
        for field_id in v:
            if not isinstance(field_id, str) or not field_id:
                raise ValueError("Field ids must be non-empty strings")
        return v

    def get_value(self, field_id: str, lang: str) -> Optional[Any]:
        """Value of a field in the given locale, if present."""
        return self.fields.get(field_id, {}).get(lang)


class RemoteEntryRef(BaseModel):
    """Identity and version of an entry that already exists remotely."""

    id: str
    version: int


class UploadResult(BaseModel):
    """Outcome of uploading (and possibly publishing) one file."""

    path: str
    entry_id: str
    version: int
    created: bool = False
    published: bool = False
    published_version: Optional[int] = None
