"""Data models for cfupload.

This package contains Pydantic models for the content type schema
fetched from Contentful and for the documents and entries that flow
through the upload pipeline.
"""

from .content_type import ContentTypeSchema, SchemaField
from .entry import SourceFile, ParsedDocument, MappedEntry, RemoteEntryRef, UploadResult

__all__ = [
    "ContentTypeSchema",
    "SchemaField",
    "SourceFile",
    "ParsedDocument",
    "MappedEntry",
    "RemoteEntryRef",
    "UploadResult",
]
