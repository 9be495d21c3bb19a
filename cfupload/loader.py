"""Loading of local content files.

Each input file is a YAML front-matter block followed by body text::

    ---
    page: Home
    title: Hi
    ---
    Welcome

The front-matter keys become entry fields and the body becomes the
``body`` field.
"""

import datetime
import glob
from pathlib import Path
from typing import Any, Iterable, List

import yaml
from frontmatter.default_handlers import YAMLHandler

from .models import SourceFile, ParsedDocument
from .utils.exceptions import FileLoadError

CONTENT_SUFFIXES = (".md", ".markdown")


def expand_paths(patterns: Iterable[str]) -> List[str]:
    """Expand glob patterns and directories into file paths.

    Args:
        patterns: Paths, glob patterns or directories from the command line

    Returns:
        File paths in input order, without duplicates
    """
    paths: List[str] = []
    seen = set()

    for pattern in patterns:
        candidate = Path(pattern)
        if candidate.is_dir():
            matches = sorted(
                str(p) for p in candidate.rglob("*")
                if p.is_file() and p.suffix.lower() in CONTENT_SUFFIXES
            )
        else:
            matches = sorted(glob.glob(pattern, recursive=True))
            # Keep unmatched patterns so reading them reports the missing file
            if not matches:
                matches = [pattern]

        for match in matches:
            if match not in seen:
                seen.add(match)
                paths.append(match)

    return paths


def read_source_file(path: str) -> SourceFile:
    """Read the full text of an input file.

    Raises:
        FileLoadError: If the file cannot be read
    """
    try:
        raw_content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileLoadError(f"reading file - {e}", file_path=path, operation="read")

    return SourceFile(path=path, raw_content=raw_content)


def _normalize_value(value: Any, key: str) -> Any:
    """Make YAML values JSON serialisable.

    Raises:
        ValueError: For values that have no JSON form, e.g. ``!!binary``
    """
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _normalize_value(v, f"{key}.{k}") for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v, key) for v in value]
    if isinstance(value, (set, frozenset)):
        return [_normalize_value(v, key) for v in sorted(value, key=str)]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise ValueError(f'field "{key}" has a {type(value).__name__} value that cannot be sent as JSON')


def parse_front_matter(source: SourceFile) -> ParsedDocument:
    """Parse a source file into metadata and body text.

    Raises:
        FileLoadError: If the front matter is unterminated, not valid YAML
            or not a mapping of JSON friendly values
    """
    # Strip a UTF-8 byte order mark left by some editors
    text = source.raw_content.lstrip("\ufeff")

    handler = YAMLHandler()
    if not handler.detect(text):
        return ParsedDocument(path=source.path, metadata={}, body=text)

    try:
        front_matter, body = handler.split(text)
    except ValueError:
        raise FileLoadError(
            "transforming yaml - unterminated front matter",
            file_path=source.path,
            operation="parse",
        )

    try:
        metadata = handler.load(front_matter)
    except yaml.YAMLError as e:
        raise FileLoadError(f"transforming yaml - {e}", file_path=source.path, operation="parse")

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FileLoadError(
            "transforming yaml - front matter must be a mapping of field names to values",
            file_path=source.path,
            operation="parse",
        )

    try:
        metadata = {str(k): _normalize_value(v, str(k)) for k, v in metadata.items()}
    except ValueError as e:
        raise FileLoadError(f"transforming yaml - {e}", file_path=source.path, operation="parse")

    # The closing delimiter line leaves its line break on the body
    if body.startswith("\n"):
        body = body[1:]

    return ParsedDocument(path=source.path, metadata=metadata, body=body)


def load_documents(paths: Iterable[str]) -> List[ParsedDocument]:
    """Read and parse every input file, preserving input order.

    Raises:
        FileLoadError: On the first file that cannot be read or parsed
    """
    return [parse_front_matter(read_source_file(path)) for path in paths]
