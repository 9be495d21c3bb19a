"""Unit tests for uploader.py and publisher.py modules.

Tests entry id derivation, the lookup/upsert/publish sequence and the
fail-fast behaviour of the worker pool with a mocked API client.
"""

import io
import threading
import pytest
from unittest.mock import Mock

from rich.console import Console

from cfupload.client import ContentfulClient
from cfupload.exceptions import APIError, UploadAborted, VersionConflictError
from cfupload.models import MappedEntry, RemoteEntryRef, UploadResult
from cfupload.publisher import Publisher
from cfupload.render import Reporter
from cfupload.uploader import Uploader, derive_entry_id
from cfupload.utils.exceptions import EntryValidationError


def make_entry(page="Home", path="home.md", **extra):
    fields = {"page": {"en-US": page}, "body": {"en-US": "Welcome"}}
    fields.update({key: {"en-US": value} for key, value in extra.items()})
    return MappedEntry(path=path, fields=fields)


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def reporter(output):
    return Reporter(Console(file=output, width=200, no_color=True))


@pytest.fixture
def client():
    mock_client = Mock(spec=ContentfulClient)
    mock_client.get_entry.return_value = None
    mock_client.put_entry.side_effect = lambda entry_id, fields, version=None, abort=None: {
        "sys": {"id": entry_id, "version": (version or 0) + 1}
    }
    mock_client.publish_entry.side_effect = lambda entry_id, version, abort=None: {
        "sys": {"id": entry_id, "version": version + 1}
    }
    return mock_client


class TestDeriveEntryId:
    """Test cases for derive_entry_id."""

    def test_lowercases_page(self):
        """Test the id is the lowercased page field."""
        assert derive_entry_id(make_entry("Home")) == "home"

    def test_strips_special_characters(self):
        """Test that characters not allowed in ids are removed."""
        assert derive_entry_id(make_entry("Docs: Getting Started!")) == "docsgettingstarted"
        assert derive_entry_id(make_entry("release-1.2_notes")) == "release-1.2_notes"

    def test_uses_configured_locale(self):
        """Test that the page value is read in the configured locale."""
        entry = MappedEntry(path="a.md", fields={"page": {"de-DE": "Start"}})

        assert derive_entry_id(entry, "de-DE") == "start"

    def test_missing_page_field(self):
        """Test that an entry without page cannot be uploaded."""
        entry = MappedEntry(path="a.md", fields={"title": {"en-US": "x"}})

        with pytest.raises(EntryValidationError) as exc_info:
            derive_entry_id(entry)

        assert exc_info.value.missing_fields == ["page"]
        assert exc_info.value.file_path == "a.md"

    def test_page_without_usable_characters(self):
        """Test that an id stripped to nothing is rejected."""
        with pytest.raises(EntryValidationError, match="no usable characters"):
            derive_entry_id(make_entry("!!!"))


class TestUploadEntry:
    """Test cases for uploading a single entry."""

    def test_new_entry(self, client, reporter, output):
        """Test that a missing remote entry is created without a version."""
        uploader = Uploader(client, reporter=reporter)

        result = uploader.upload_entry(make_entry())

        client.get_entry.assert_called_once_with("home", abort=None)
        client.put_entry.assert_called_once_with(
            "home",
            {"page": {"en-US": "Home"}, "body": {"en-US": "Welcome"}},
            version=None,
            abort=None,
        )
        assert result == UploadResult(path="home.md", entry_id="home", version=1, created=True)
        assert "uploaded file home.md" in output.getvalue()
        client.publish_entry.assert_not_called()

    def test_existing_entry_sends_version(self, client, reporter):
        """Test that the remote version is sent on update."""
        client.get_entry.return_value = RemoteEntryRef(id="home", version=3)
        uploader = Uploader(client, reporter=reporter)

        result = uploader.upload_entry(make_entry())

        assert client.put_entry.call_args.kwargs["version"] == 3
        assert result.version == 4
        assert result.created is False

    def test_version_conflict_is_raised(self, client, reporter):
        """Test that a version mismatch from the server is fatal."""
        client.get_entry.return_value = RemoteEntryRef(id="home", version=3)
        client.put_entry.side_effect = VersionConflictError("Version mismatch", status_code=409)
        uploader = Uploader(client, reporter=reporter)

        with pytest.raises(VersionConflictError):
            uploader.upload_entry(make_entry())

    def test_publish_uses_upload_version(self, client, reporter, output):
        """Test that publishing sends the version returned by the upload."""
        client.get_entry.return_value = RemoteEntryRef(id="home", version=3)
        uploader = Uploader(client, publisher=Publisher(client, reporter), reporter=reporter)

        result = uploader.upload_entry(make_entry())

        client.publish_entry.assert_called_once_with("home", 4, abort=None)
        assert result.published is True
        assert result.published_version == 5
        assert "published entry home" in output.getvalue()

    def test_publish_failure(self, client, reporter, output):
        """Test that a failed publish is reported and raised."""
        client.publish_entry.side_effect = APIError("nope", status_code=422)
        uploader = Uploader(client, publisher=Publisher(client, reporter), reporter=reporter)

        with pytest.raises(APIError):
            uploader.upload_entry(make_entry())

        assert "couldn't publish entry with id: \"home\"" in output.getvalue()

    def test_aborted_before_start(self, client, reporter):
        """Test that an aborted run skips entries that did not start."""
        abort = threading.Event()
        abort.set()
        uploader = Uploader(client, reporter=reporter)

        with pytest.raises(UploadAborted):
            uploader.upload_entry(make_entry(), abort=abort)

        client.get_entry.assert_not_called()


class TestUploadAll:
    """Test cases for uploading many entries."""

    def test_results_in_input_order(self, client, reporter):
        """Test that results follow the input order."""
        entries = [make_entry(f"Page {i}", path=f"p{i}.md") for i in range(10)]
        uploader = Uploader(client, concurrency=3, reporter=reporter)

        results = uploader.upload_all(entries)

        assert [r.entry_id for r in results] == [f"page{i}" for i in range(10)]
        assert client.put_entry.call_count == 10

    def test_empty_input(self, client, reporter):
        """Test that nothing is sent for no entries."""
        assert Uploader(client, reporter=reporter).upload_all([]) == []
        client.get_entry.assert_not_called()

    def test_first_failure_aborts(self, client, reporter):
        """Test that one failing entry fails the whole upload."""
        def put_entry(entry_id, fields, version=None, abort=None):
            if entry_id == "bad":
                raise VersionConflictError("Version mismatch", status_code=409)
            return {"sys": {"id": entry_id, "version": 1}}

        client.put_entry.side_effect = put_entry
        entries = [make_entry("Good", path="good.md"), make_entry("Bad", path="bad.md")]
        uploader = Uploader(client, concurrency=1, reporter=reporter)

        with pytest.raises(VersionConflictError):
            uploader.upload_all(entries)

    def test_pending_entries_are_cancelled(self, client, reporter):
        """Test that entries queued behind a failure are never sent."""
        sent = []

        def get_entry(entry_id, abort=None):
            if entry_id == "first":
                raise APIError("boom", status_code=500)
            abort.wait(5)
            return None

        def put_entry(entry_id, fields, version=None, abort=None):
            if abort.is_set():
                raise UploadAborted("cancelled")
            sent.append(entry_id)
            return {"sys": {"id": entry_id, "version": 1}}

        client.get_entry.side_effect = get_entry
        client.put_entry.side_effect = put_entry
        entries = [make_entry("First", path="first.md")] + [
            make_entry(f"Later {i}", path=f"later{i}.md") for i in range(20)
        ]
        uploader = Uploader(client, concurrency=1, reporter=reporter)

        with pytest.raises(APIError, match="boom"):
            uploader.upload_all(entries)

        assert sent == []
