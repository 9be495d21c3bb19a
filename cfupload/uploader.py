"""Upload of mapped entries to Contentful.

Each entry is looked up by an id derived from its ``page`` field, then
upserted with the remote version as optimistic-concurrency token, and
optionally published. Entries are processed by a bounded worker pool;
the first failure stops the whole run.
"""

import re
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from .client import ContentfulClient
from .config import DEFAULT_LANG
from .exceptions import UploadAborted
from .models import MappedEntry, UploadResult
from .publisher import Publisher
from .render import Reporter
from .utils.exceptions import EntryValidationError

ID_FIELD = "page"
ENTRY_ID_DISALLOWED = re.compile(r"[^a-z0-9._-]")


def derive_entry_id(entry: MappedEntry, lang: str = DEFAULT_LANG) -> str:
    """Build the entry id from the entry's ``page`` field.

    The value is lowercased and every character Contentful does not allow
    in ids is removed, e.g. ``"Docs: Home"`` becomes ``"docshome"``.

    Raises:
        EntryValidationError: If the entry has no usable ``page`` value
    """
    value = entry.get_value(ID_FIELD, lang)
    if value is None:
        raise EntryValidationError(
            f'cannot derive entry id - missing field "{ID_FIELD}" for locale "{lang}"',
            file_path=entry.path,
            missing_fields=[ID_FIELD],
        )

    entry_id = ENTRY_ID_DISALLOWED.sub("", str(value).lower())
    if not entry_id:
        raise EntryValidationError(
            f'cannot derive entry id - field "{ID_FIELD}" has no usable characters',
            file_path=entry.path,
        )
    return entry_id


class Uploader:
    """Upserts entries and hands them to the publisher."""

    def __init__(
        self,
        client: ContentfulClient,
        lang: str = DEFAULT_LANG,
        publisher: Optional[Publisher] = None,
        concurrency: int = 4,
        reporter: Optional[Reporter] = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            client: API client shared by all uploads
            lang: Locale used to read the ``page`` field
            publisher: Publishes each entry after upload when given
            concurrency: Maximum number of entries processed at once
            reporter: Console reporter
        """
        self.client = client
        self.lang = lang
        self.publisher = publisher
        self.concurrency = max(1, concurrency)
        self.reporter = reporter or client.reporter

    def upload_entry(self, entry: MappedEntry, abort: Optional[threading.Event] = None) -> UploadResult:
        """Upsert one entry and publish it if a publisher is configured.

        Args:
            entry: Validated entry
            abort: Event set when another upload failed

        Returns:
            Result describing the uploaded entry

        Raises:
            APIError: If the upsert or publish request fails
            UploadAborted: If the run was aborted while this entry was pending
        """
        if abort is not None and abort.is_set():
            raise UploadAborted(f"Upload of {entry.path} cancelled")

        entry_id = derive_entry_id(entry, self.lang)
        self.reporter.progress(f"uploading file {entry.path}")

        existing = self.client.get_entry(entry_id, abort=abort)
        if existing is None:
            self.reporter.debug(f"Entry {entry_id} doesn't exist yet, creating it")
            version = None
        else:
            self.reporter.debug(f"Entry {entry_id} exists at version {existing.version}")
            version = existing.version

        response = self.client.put_entry(entry_id, entry.fields, version=version, abort=abort)
        self.reporter.success(f"uploaded file {entry.path}")

        sys_data = response.get("sys", {})
        result = UploadResult(
            path=entry.path,
            entry_id=sys_data.get("id", entry_id),
            version=sys_data.get("version", version if version is not None else 1),
            created=existing is None,
        )

        if self.publisher is not None:
            result = self.publisher.publish(result, abort=abort)

        return result

    def upload_all(self, entries: Sequence[MappedEntry]) -> List[UploadResult]:
        """Upload all entries through a bounded worker pool.

        Args:
            entries: Validated entries

        Returns:
            Results in the order of ``entries``

        Raises:
            CfUploadError: The first failure of any entry; pending uploads are cancelled
        """
        if not entries:
            return []

        abort = threading.Event()
        results: List[Optional[UploadResult]] = [None] * len(entries)
        executor = ThreadPoolExecutor(
            max_workers=min(self.concurrency, len(entries)),
            thread_name_prefix="cfupload",
        )

        try:
            futures = {
                executor.submit(self.upload_entry, entry, abort): index
                for index, entry in enumerate(entries)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        except BaseException:
            abort.set()
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return [result for result in results if result is not None]
