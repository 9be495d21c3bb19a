"""The upload run, from schema fetch to publish.

Stages run strictly in order: fetch the content type, load the files,
map them to entries, validate every entry, then upload (and publish).
Any error aborts the run before the next stage starts.
"""

from typing import Dict, Iterable, List, Optional

from .client import ContentfulClient
from .config import UploadSettings
from .exceptions import UsageError
from .loader import expand_paths, load_documents
from .mapper import EntryTransform, identity, load_mapper, map_document
from .models import MappedEntry, UploadResult
from .publisher import Publisher
from .render import Reporter
from .uploader import ID_FIELD, Uploader, derive_entry_id
from .utils.exceptions import EntryValidationError
from .utils.throttle import RateThrottle
from .validator import validate_entries


def check_entry_ids(entries: Iterable[MappedEntry], lang: str) -> Dict[str, str]:
    """Derive every entry id up front and reject ids shared by two files.

    Returns:
        Mapping of entry id to file path

    Raises:
        EntryValidationError: If an id cannot be derived or is used twice
    """
    seen: Dict[str, str] = {}
    for entry in entries:
        entry_id = derive_entry_id(entry, lang)
        if entry_id in seen:
            raise EntryValidationError(
                f'duplicate entry id "{entry_id}" - {seen[entry_id]} and {entry.path} both derive it '
                f'from their "{ID_FIELD}" field, so one would overwrite the other',
                file_path=entry.path,
            )
        seen[entry_id] = entry.path
    return seen


def run_upload(
    settings: UploadSettings,
    patterns: List[str],
    reporter: Optional[Reporter] = None,
    client: Optional[ContentfulClient] = None,
    transform: Optional[EntryTransform] = None,
) -> List[UploadResult]:
    """Run the whole upload for the given input patterns.

    Args:
        settings: Validated run settings
        patterns: File paths, globs or directories
        reporter: Console reporter
        client: API client; built from ``settings`` if None
        transform: Entry transform; loaded from ``settings.mapper`` if None

    Returns:
        One result per uploaded file, in input order (empty on a dry run)

    Raises:
        CfUploadError: On the first failure of any stage
    """
    reporter = reporter or Reporter()

    if not patterns:
        raise UsageError("You need to pass a file or a folder name", show_usage=True)

    if transform is None:
        transform = load_mapper(settings.mapper) if settings.mapper else identity

    owns_client = client is None
    if client is None:
        client = ContentfulClient(settings, throttle=RateThrottle(), reporter=reporter)

    try:
        return _run_stages(settings, patterns, reporter, client, transform)
    finally:
        if owns_client:
            client.close()


def _run_stages(
    settings: UploadSettings,
    patterns: List[str],
    reporter: Reporter,
    client: ContentfulClient,
    transform: EntryTransform,
) -> List[UploadResult]:
    reporter.info("\nchecking authorisation and if content type exists")
    reporter.info(f">> url: {settings.space_url}/content_types/{settings.content_type}")
    schema = client.get_content_type()
    reporter.success(f"Content type with name {schema.name} has been found.")

    paths = expand_paths(patterns)
    documents = load_documents(paths)
    entries = [map_document(document, settings.lang, transform) for document in documents]
    validate_entries(entries, schema)
    check_entry_ids(entries, settings.lang)

    if settings.dry_run:
        reporter.success(f"validated {len(entries)} files, dry run - nothing uploaded")
        return []

    publisher = Publisher(client, reporter) if settings.publish else None
    uploader = Uploader(
        client,
        lang=settings.lang,
        publisher=publisher,
        concurrency=settings.concurrency,
        reporter=reporter,
    )

    reporter.progress(f"starting upload of {len(entries)} files.")
    return uploader.upload_all(entries)
