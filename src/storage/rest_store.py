# src/storage/rest_store.py

"""HTTP/JSON document store client with a change-detecting poller."""

import asyncio
import hashlib
import json
import logging
import time
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import StoreError
from src.storage.document_store import (
    Document,
    DocumentStore,
    ErrorCallback,
    SnapshotCallback,
    Unsubscribe,
)

logger = logging.getLogger("catalog_sync.store")

# Status codes worth retrying; other 4xx responses fail immediately
_RETRYABLE_STATUS: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})


def _fingerprint(documents: list[Document]) -> str:
    """Stable digest of a listing, used to detect changes between polls."""
    payload = json.dumps(documents, sort_keys=True, default=str)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def parse_listing(data: Any) -> list[Document]:
    """Decode a listing payload into ``(id, fields)`` pairs.

    Accepts ``{"documents": [...]}`` or a bare list. Each item carries an
    ``id`` plus either a ``fields`` object or its fields inline.
    """
    if isinstance(data, dict):
        data = data.get("documents")
    if not isinstance(data, list):
        raise StoreError("Unexpected listing payload from document store")

    documents: list[Document] = []
    for item in data:
        if not isinstance(item, dict) or item.get("id") in (None, ""):
            logger.warning("Skipping listing entry without an id: %r", item)
            continue
        fields = item.get("fields")
        if not isinstance(fields, dict):
            fields = {k: v for k, v in item.items() if k != "id"}
        documents.append((str(item["id"]), fields))
    return documents


class _PollHandle:
    """Liveness flag shared between a poller task and its unsubscribe."""

    def __init__(self) -> None:
        self.active = True
        self.task: asyncio.Task[None] | None = None


class RestDocumentStore(DocumentStore):
    """Document store reached over a small REST API.

    ``GET {base}/{collection}`` lists, ``POST`` creates, and
    ``PATCH`` / ``DELETE {base}/{collection}/{id}`` update and delete.
    Blocking HTTP calls run in worker threads via ``asyncio.to_thread``.
    """

    def __init__(
        self,
        base_url: str,
        poll_interval: float | None = None,
        session: Any = None,
    ) -> None:
        if not base_url:
            raise ValueError("RestDocumentStore needs a base URL")
        self.base_url = base_url.rstrip("/")
        self.settings = Settings()
        self.session = session or curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._poll_interval: float = (
            poll_interval
            if poll_interval is not None
            else self.settings.POLL_INTERVAL
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        self._pollers: list[_PollHandle] = []

    # ── Private helpers ──────────────────────────────────

    def _url(self, collection: str, doc_id: str | None = None) -> str:
        url = f"{self.base_url}/{collection}"
        return f"{url}/{doc_id}" if doc_id is not None else url

    def _request(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request with retries; return the decoded JSON body."""
        last_error: Exception | None = None
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.request(
                    method,
                    url,
                    headers=self.settings.DEFAULT_HEADERS,
                    json=payload,
                    timeout=self._request_timeout,
                )
            except Exception as exc:
                logger.warning(
                    "%s %s: request error on attempt %d: %s",
                    method,
                    url,
                    attempt + 1,
                    exc,
                )
                last_error = exc
                time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))
                continue

            if resp.status_code < 400:
                if not resp.content:
                    return None
                try:
                    return resp.json()
                except ValueError as exc:
                    raise StoreError(
                        f"Invalid JSON from {method} {url}"
                    ) from exc

            message = f"HTTP {resp.status_code} on {method} {url}"
            if resp.status_code not in _RETRYABLE_STATUS:
                raise StoreError(message)
            logger.warning("%s (attempt %d)", message, attempt + 1)
            last_error = StoreError(message)
            time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))

        raise StoreError(
            f"{method} {url} failed after "
            f"{self.settings.MAX_RETRIES} attempts: {last_error}"
        ) from last_error

    async def _poll(
        self,
        collection: str,
        on_event: SnapshotCallback,
        on_error: ErrorCallback,
        handle: _PollHandle,
    ) -> None:
        last_seen: str | None = None
        while handle.active:
            try:
                documents = await self.list_all(collection)
            except Exception as exc:
                last_seen = None
                if handle.active:
                    logger.warning(
                        "Poll of '%s' failed: %s", collection, exc
                    )
                    on_error(exc)
            else:
                digest = _fingerprint(documents)
                if digest != last_seen and handle.active:
                    last_seen = digest
                    on_event(documents)
            await asyncio.sleep(self._poll_interval)

    # ── DocumentStore API ────────────────────────────────

    async def list_all(self, collection: str) -> list[Document]:
        data = await asyncio.to_thread(
            self._request, "GET", self._url(collection)
        )
        return parse_listing(data)

    def subscribe(
        self,
        collection: str,
        on_event: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        loop = asyncio.get_running_loop()
        handle = _PollHandle()
        handle.task = loop.create_task(
            self._poll(collection, on_event, on_error, handle)
        )
        self._pollers.append(handle)
        logger.info(
            "Polling '%s' every %.1fs", collection, self._poll_interval
        )

        def unsubscribe() -> None:
            if not handle.active:
                return
            handle.active = False
            if handle.task is not None:
                handle.task.cancel()
            self._pollers.remove(handle)
            logger.info("Stopped polling '%s'", collection)

        return unsubscribe

    async def create(
        self, collection: str, fields: dict[str, Any],
    ) -> str:
        data = await asyncio.to_thread(
            self._request, "POST", self._url(collection), fields
        )
        if not isinstance(data, dict) or not data.get("id"):
            raise StoreError("Create response did not include an id")
        return str(data["id"])

    async def update(
        self, collection: str, doc_id: str, fields: dict[str, Any],
    ) -> None:
        await asyncio.to_thread(
            self._request, "PATCH", self._url(collection, doc_id), fields
        )

    async def delete(self, collection: str, doc_id: str) -> None:
        await asyncio.to_thread(
            self._request, "DELETE", self._url(collection, doc_id)
        )

    def close(self) -> None:
        """Cancel outstanding pollers and close the HTTP session."""
        for handle in list(self._pollers):
            handle.active = False
            if handle.task is not None:
                handle.task.cancel()
        self._pollers.clear()
        self.session.close()
