"""Mapping of parsed documents onto Contentful entry fields.

A document's metadata plus its body become entry fields, every value
wrapped under the configured locale. A user-supplied transform then gets
the chance to reshape the entry for site-specific needs.

A mapper is any callable taking and returning a ``MappedEntry``::

    # mapper.py
    def mapper(entry):
        entry.fields["slug"] = {"en-US": entry.fields["page"]["en-US"].lower()}
        return entry
"""

import importlib
import importlib.util
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from .config import DEFAULT_LANG
from .exceptions import ConfigError
from .models import ParsedDocument, MappedEntry

EntryTransform = Callable[[MappedEntry], Optional[MappedEntry]]

MAPPER_ATTRIBUTES = ("mapper", "map_entry")


def identity(entry: MappedEntry) -> MappedEntry:
    """Default transform, returns the entry unchanged."""
    return entry


def _coerce_entry(result: object, original: MappedEntry) -> MappedEntry:
    if result is None:
        return original
    if isinstance(result, MappedEntry):
        return result
    if isinstance(result, Mapping):
        data = dict(result)
        data.setdefault("path", original.path)
        try:
            return MappedEntry.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Mapper returned an invalid entry for {original.path}: {e}")
    raise ConfigError(
        f"Mapper must return an entry, got {type(result).__name__} for {original.path}"
    )


def map_document(
    document: ParsedDocument,
    lang: str = DEFAULT_LANG,
    transform: EntryTransform = identity,
) -> MappedEntry:
    """Build the entry for one document.

    Args:
        document: Parsed input file
        lang: Locale every value is stored under
        transform: Site-specific transform applied last

    Returns:
        The mapped entry
    """
    data = dict(document.metadata)
    data["body"] = document.body

    entry = MappedEntry(
        path=document.path,
        fields={key: {lang: value} for key, value in data.items()},
    )
    return _coerce_entry(transform(entry), entry)


def _load_module_from_file(path: Path):
    module_name = f"cfupload_mapper_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Cannot load mapper file: {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_mapper(reference: str) -> EntryTransform:
    """Resolve the ``--mapper`` option to a transform.

    Args:
        reference: Path to a ``.py`` file, or ``package.module[:function]``

    Returns:
        The transform callable

    Raises:
        ConfigError: If the mapper cannot be imported or is not callable
    """
    attribute = None
    path = Path(reference)

    try:
        if path.suffix == ".py" or path.exists():
            if not path.is_file():
                raise ConfigError(f"Mapper file not found: {reference}")
            module = _load_module_from_file(path.resolve())
        else:
            module_name, _, attribute = reference.partition(":")
            module = importlib.import_module(module_name)
    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(f"Failed to load mapper '{reference}': {e}")

    names = (attribute,) if attribute else MAPPER_ATTRIBUTES
    for name in names:
        candidate = getattr(module, name, None)
        if callable(candidate):
            return candidate

    raise ConfigError(
        f"Mapper '{reference}' must define a function named {' or '.join(names)}"
    )
