"""Blob store backed by the Pinata IPFS pinning API."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import requests
from loguru import logger

from pinsnap.config import PinataSettings
from pinsnap.snapshot.models import ContentId
from pinsnap.stores.errors import BlobNotFoundError, BlobStoreError


class PinataBlobStore:
    """Pins snapshot blobs on IPFS through Pinata and reads them back via its gateway.

    The HTTP calls are blocking ``requests`` calls run in a worker thread, so
    awaiting them does not stall the event loop.
    """

    def __init__(
        self,
        settings: PinataSettings,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings.validate()
        self._session = session or requests.Session()

    async def upload(self, data: bytes, metadata: Optional[dict[str, Any]] = None) -> ContentId:
        return await asyncio.to_thread(self._upload_sync, data, dict(metadata or {}))

    async def fetch(self, content_id: ContentId) -> bytes:
        return await asyncio.to_thread(self._fetch_sync, content_id)

    async def unpin(self, content_id: ContentId) -> None:
        await asyncio.to_thread(self._unpin_sync, content_id)

    async def verify_credentials(self) -> bool:
        return await asyncio.to_thread(self._verify_sync)

    def close(self) -> None:
        self._session.close()

    def _upload_sync(self, data: bytes, metadata: dict[str, Any]) -> ContentId:
        filename = metadata.pop("filename", None) or "snapshot.json"
        pinata_metadata = {
            "name": metadata.get("name") or filename,
            "keyvalues": _stringify(metadata.get("keyvalues") or {}),
        }
        response = self._api_request(
            "POST",
            "/pinning/pinFileToIPFS",
            files={"file": (filename, data, "application/json")},
            data={"pinataMetadata": json.dumps(pinata_metadata)},
        )
        try:
            content_id = response.json()["IpfsHash"]
        except (ValueError, KeyError, TypeError) as exc:
            raise BlobStoreError("Pinata upload response did not include IpfsHash") from exc
        logger.info(f"Pinned {len(data)} bytes to IPFS as {content_id}")
        return ContentId(str(content_id))

    def _fetch_sync(self, content_id: ContentId) -> bytes:
        url = f"{self.settings.gateway_url}/ipfs/{content_id}"
        response = self._request("GET", url)
        return response.content

    def _unpin_sync(self, content_id: ContentId) -> None:
        self._api_request("DELETE", f"/pinning/unpin/{content_id}")
        logger.info(f"Unpinned {content_id}")

    def _verify_sync(self) -> bool:
        self._api_request("GET", "/data/testAuthentication")
        return True

    @property
    def _api_url(self) -> str:
        return self.settings.api_url.rstrip("/")

    def _api_request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        # Only the pinning API sees the JWT; gateway fetches go out unauthenticated.
        headers = {**kwargs.pop("headers", {}), "Authorization": f"Bearer {self.settings.jwt}"}
        return self._request(method, f"{self._api_url}{path}", headers=headers, **kwargs)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self._session.request(method, url, timeout=self.settings.timeout, **kwargs)
        except requests.RequestException as exc:
            raise BlobStoreError(f"Pinata request failed: {method} {url}: {exc}") from exc
        if response.status_code == 404:
            raise BlobNotFoundError(f"Not found: {url}")
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise BlobStoreError(
                f"Pinata returned HTTP {response.status_code} for {method} {url}"
            ) from exc
        return response


def _stringify(values: dict[str, Any]) -> dict[str, str]:
    return {str(key): str(value) for key, value in values.items() if value is not None}
