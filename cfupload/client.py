"""Contentful Content Management API client.

This module provides the small set of Content Management API calls the
uploader needs: fetching a content type, looking up, upserting and
publishing entries. Error responses are converted into the ``APIError``
hierarchy and every call after the content type fetch goes through the
shared ``RateThrottle``.
"""

import threading
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import UploadSettings
from .models import ContentTypeSchema, RemoteEntryRef
from .render import Reporter
from .utils.throttle import RateThrottle
from .exceptions import (
    APIError,
    BadRequestError,
    ConnectionFailedError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    UnprocessableEntityError,
    VersionConflictError,
)

CONTENT_TYPE = "application/vnd.contentful.management.v1+json"

STATUS_ERRORS = {
    400: (BadRequestError, "Bad request"),
    401: (UnauthorizedError, "Unauthorized - check your access token"),
    403: (ForbiddenError, "Forbidden - insufficient permissions"),
    404: (NotFoundError, "Resource not found"),
    409: (VersionConflictError, "Version mismatch - the entry was changed by someone else"),
    422: (UnprocessableEntityError, "Validation failed"),
}


class ContentfulClient:
    """Client for the Contentful Content Management API."""

    def __init__(
        self,
        settings: UploadSettings,
        throttle: Optional[RateThrottle] = None,
        reporter: Optional[Reporter] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Run settings carrying token, space and content type
            throttle: Shared request throttle; a default one is created if None
            reporter: Console reporter used for debug output
            session: Optional preconfigured requests session
        """
        self.settings = settings
        self.throttle = throttle or RateThrottle()
        self.reporter = reporter or Reporter()
        self._rate_limit_info: Dict[str, Any] = {}

        self.session = session or requests.Session()
        if session is None:
            self._configure_session()
        self.session.headers.update({
            "Authorization": f"Bearer {settings.token}",
            "Content-Type": CONTENT_TYPE,
            "Accept": "application/json",
        })

    def _configure_session(self) -> None:
        """Size the connection pool to the number of concurrent uploads."""
        pool_size = max(10, self.settings.concurrency)
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _parse_rate_limit_headers(self, response: requests.Response) -> Dict[str, Any]:
        return {
            "second_limit": response.headers.get("X-Contentful-RateLimit-Second-Limit"),
            "second_remaining": response.headers.get("X-Contentful-RateLimit-Second-Remaining"),
            "hour_limit": response.headers.get("X-Contentful-RateLimit-Hour-Limit"),
            "hour_remaining": response.headers.get("X-Contentful-RateLimit-Hour-Remaining"),
            "reset": response.headers.get("X-Contentful-RateLimit-Reset"),
        }

    def _handle_response(self, response: requests.Response) -> Dict[str, Any]:
        """Handle API response and convert errors to appropriate exceptions.

        Args:
            response: Response object

        Returns:
            Parsed JSON response

        Raises:
            APIError: For various HTTP error conditions
        """
        self._rate_limit_info.update(
            {k: v for k, v in self._parse_rate_limit_headers(response).items() if v is not None}
        )

        if 200 <= response.status_code < 300:
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError:
                raise APIError(
                    "Response is not valid JSON",
                    status_code=response.status_code,
                )

        # Extract error details from response
        error_data: Dict[str, Any] = {}
        try:
            parsed = response.json()
            if isinstance(parsed, dict):
                error_data = parsed
        except ValueError:
            pass

        api_message = error_data.get("message")
        status = response.status_code

        if status in STATUS_ERRORS:
            error_class, default_message = STATUS_ERRORS[status]
            raise error_class(
                api_message or default_message,
                status_code=status,
                response_data=error_data,
            )
        elif status == 429:
            reset = response.headers.get("X-Contentful-RateLimit-Reset")
            message = api_message or "Rate limit exceeded"
            if reset:
                message += f", resets in {reset} seconds"
            raise RateLimitError(
                message,
                status_code=status,
                response_data=error_data,
                retry_after=int(reset) if reset and reset.isdigit() else None,
            )
        elif status >= 500:
            raise ServerError(
                api_message or f"Server error: {status}",
                status_code=status,
                response_data=error_data,
            )

        raise APIError(
            api_message or f"Unexpected response: {status}",
            status_code=status,
            response_data=error_data,
        )

    def _make_request(
        self,
        method: str,
        path: str,
        throttled: bool = True,
        abort: Optional[threading.Event] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Send a request to a space-scoped endpoint.

        Args:
            method: HTTP method
            path: Path below ``/spaces/{space_id}``
            throttled: Whether the call waits on the rate throttle
            abort: Event that cancels the throttle wait
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response

        Raises:
            APIError: For error responses and connection failures
        """
        url = f"{self.settings.space_url}{path}"

        if throttled:
            delay = self.throttle.wait(abort)
            if delay:
                self.reporter.debug(f"Throttled {method} {path} by {delay:.0f}s")

        self.reporter.debug(f"Making {method} request to {url}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                timeout=self.settings.timeout,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise ConnectionFailedError(f"Request to {url} failed: {e}")

        self.reporter.debug(f"Response status: {response.status_code}")
        return self._handle_response(response)

    def get_content_type(self) -> ContentTypeSchema:
        """Fetch the content type schema and seed the throttle from its headers.

        Returns:
            The content type schema

        Raises:
            APIError: If the content type cannot be fetched
        """
        url = f"{self.settings.space_url}/content_types/{self.settings.content_type}"
        self.reporter.debug(f"Making GET request to {url}")

        try:
            response = self.session.get(
                url,
                params={"access_token": self.settings.token},
                timeout=self.settings.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ConnectionFailedError(f"Request to {url} failed: {e}")

        data = self._handle_response(response)

        if not self.throttle.seed_from_headers(response.headers):
            self.reporter.debug("No rate limit headers found, using default rate")
        self.reporter.debug(f"Rate state: {self.throttle.get_state()}")

        try:
            return ContentTypeSchema.model_validate(data)
        except ValueError as e:
            raise APIError(
                f"Unexpected content type response: {e}",
                status_code=response.status_code,
            )

    def get_entry(
        self,
        entry_id: str,
        abort: Optional[threading.Event] = None,
    ) -> Optional[RemoteEntryRef]:
        """Look up an existing entry.

        Args:
            entry_id: Entry id
            abort: Event that cancels the throttle wait

        Returns:
            The entry's id and version, or None if it does not exist
        """
        try:
            data = self._make_request("GET", f"/entries/{entry_id}", abort=abort)
        except NotFoundError:
            return None

        sys_data = data.get("sys", {})
        return RemoteEntryRef(
            id=sys_data.get("id", entry_id),
            version=sys_data.get("version", 1),
        )

    def put_entry(
        self,
        entry_id: str,
        fields: Dict[str, Dict[str, Any]],
        version: Optional[int] = None,
        abort: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """Create or overwrite an entry.

        Args:
            entry_id: Entry id
            fields: Entry fields keyed by field id and locale
            version: Current remote version; omitted for new entries
            abort: Event that cancels the throttle wait

        Returns:
            The created or updated entry

        Raises:
            VersionConflictError: If ``version`` is no longer current
        """
        headers = {"X-Contentful-Content-Type": self.settings.content_type}
        if version is not None:
            headers["X-Contentful-Version"] = str(version)

        return self._make_request(
            "PUT",
            f"/entries/{entry_id}",
            abort=abort,
            headers=headers,
            json={"fields": fields},
        )

    def publish_entry(
        self,
        entry_id: str,
        version: int,
        abort: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """Publish an entry.

        Args:
            entry_id: Entry id
            version: Version of the entry to publish
            abort: Event that cancels the throttle wait

        Returns:
            The published entry
        """
        return self._make_request(
            "PUT",
            f"/entries/{entry_id}/published",
            abort=abort,
            headers={"X-Contentful-Version": str(version)},
        )

    def get_rate_limit_info(self) -> Dict[str, Any]:
        """Get the rate limit headers seen on the latest responses."""
        return dict(self._rate_limit_info)

    def close(self) -> None:
        self.session.close()
