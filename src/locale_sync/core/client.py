import logging
import threading
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

import requests

from ..config import SyncOptions
from ..errors import RemoteError
from ..formats import NamespaceContent, flatten
from ..sync.models import RemoteBlob

logger = logging.getLogger(__name__)


class RemoteClient:
    """Request/response client for the translation-management API.

    One instance is shared by all concurrent stages of a run; each worker
    thread gets its own ``requests.Session``.
    """

    def __init__(self, options: SyncOptions):
        self.options = options
        self._thread_local = threading.local()
        self.base_url = options.api_path.rstrip("/")

    @property
    def session(self) -> requests.Session:
        """Return the current thread's session."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers["Accept"] = "application/json"
        if self.options.api_key:
            session.headers["Authorization"] = self.options.api_key
        return session

    def _request(
        self, method: str, url: str, payload: Any = None
    ) -> requests.Response:
        """
        Send a request and turn every failure into a RemoteError.

        404 responses are returned to the caller, which decides whether a
        missing resource is an error.
        """
        logger.debug("%s %s", method, url)
        try:
            response = self._get_session().request(
                method,
                url,
                json=payload,
                timeout=self.options.timeout,
            )
        except requests.RequestException as e:
            raise RemoteError(f"{method} {url} failed: {e}") from e

        # Missing resources often carry a {"message": "Not Found"} body
        if response.status_code == 404:
            return response

        body = self._json_body(response)
        if isinstance(body, dict):
            message = body.get("errorMessage") or body.get("message")
            if message:
                raise RemoteError(str(message), response.status_code)

        if response.status_code >= 300:
            raise RemoteError(
                f"{response.reason} ({response.status_code})",
                response.status_code,
            )
        return response

    @staticmethod
    def _json_body(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _raise_for_missing(self, response: requests.Response) -> None:
        if response.status_code == 404:
            raise RemoteError(
                f"{response.reason} ({response.status_code})",
                response.status_code,
            )

    def list_languages(self) -> dict[str, dict]:
        """
        List the languages defined for the project.

        Returns a mapping of language code to its metadata (e.g.
        ``isReferenceLanguage``).
        """
        url = f"{self.base_url}/languages/{self.options.project_id}"
        response = self._request("GET", url)
        self._raise_for_missing(response)
        languages = self._json_body(response) or {}
        if not isinstance(languages, dict) or not languages:
            raise RemoteError(
                f'Project with id "{self.options.project_id}" not found!'
            )
        return {
            code: meta if isinstance(meta, dict) else {}
            for code, meta in languages.items()
        }

    def list_blobs(self) -> list[RemoteBlob]:
        """
        List every (language, namespace) pair stored for the project version.
        """
        url = (
            f"{self.base_url}/download/"
            f"{self.options.project_id}/{self.options.version}"
        )
        response = self._request("GET", url)
        self._raise_for_missing(response)
        entries = self._json_body(response) or []
        if not isinstance(entries, list):
            raise RemoteError(f"Unexpected download listing from {url}")
        try:
            return [RemoteBlob.from_listing(entry) for entry in entries]
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteError(
                f"Unexpected download listing from {url}: {e}"
            ) from e

    def fetch_namespace(
        self, language: str, namespace: str, is_private: bool = False
    ) -> tuple[NamespaceContent, datetime | None]:
        """
        Fetch the current content of one namespace, flattened.

        A namespace that does not exist yet yields ``({}, None)``.

        Returns:
            Tuple of (content, last_modified).
        """
        prefix = "private/" if is_private else ""
        url = (
            f"{self.base_url}/{prefix}{self.options.project_id}/"
            f"{self.options.version}/{language}/{namespace}"
        )
        response = self._request("GET", url)
        if response.status_code == 404:
            return {}, None
        return (
            flatten(self._json_body(response) or {}),
            _parse_last_modified(response.headers.get("Last-Modified")),
        )

    def push_changes(
        self,
        language: str,
        namespace: str,
        payload: dict[str, str | None],
    ) -> None:
        """
        Apply key mutations to one namespace; ``None`` removes a key.
        """
        url = (
            f"{self.base_url}/update/{self.options.project_id}/"
            f"{self.options.version}/{language}/{namespace}"
        )
        response = self._request("POST", url, payload=payload)
        self._raise_for_missing(response)


def _parse_last_modified(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
