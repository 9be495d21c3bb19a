"""Publishing of uploaded entries."""

import threading
from typing import Optional

from .client import ContentfulClient
from .exceptions import APIError
from .models import UploadResult
from .render import Reporter


class Publisher:
    """Marks uploaded entries as published."""

    def __init__(self, client: ContentfulClient, reporter: Optional[Reporter] = None) -> None:
        self.client = client
        self.reporter = reporter or client.reporter

    def publish(self, result: UploadResult, abort: Optional[threading.Event] = None) -> UploadResult:
        """Publish the entry behind an upload result.

        Args:
            result: Result of the upload, carrying the entry id and version
            abort: Event that cancels the throttle wait

        Returns:
            A copy of ``result`` marked as published

        Raises:
            APIError: If publishing fails
        """
        self.reporter.progress(f'publishing entry with id: "{result.entry_id}"')

        try:
            published = self.client.publish_entry(result.entry_id, result.version, abort=abort)
        except APIError:
            self.reporter.error(f"couldn't publish entry with id: \"{result.entry_id}\"")
            raise

        self.reporter.success(f"published entry {result.entry_id}")
        return result.model_copy(update={
            "published": True,
            "published_version": published.get("sys", {}).get("version"),
        })
