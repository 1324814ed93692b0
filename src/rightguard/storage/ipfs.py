"""Media pinning for incident recordings."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

import httpx

from rightguard.errors import IntegrationError
from rightguard.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


@dataclass
class PinnedMedia:
    """Metadata describing a pinned recording."""

    content_hash: str
    url: str
    file_name: str
    size_bytes: int


class MediaStorage(Protocol):
    """Anything that can persist recording bytes and hand back a public URL."""

    def pin(self, file_name: str, data: bytes, content_type: Optional[str]) -> PinnedMedia: ...


class PinataStorage:
    """Pin recordings to IPFS through Pinata's ``pinFileToIPFS`` endpoint."""

    def __init__(self, *, settings: Settings | None = None, client: httpx.Client | None = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def _metadata(self, timestamp_ms: int) -> dict:
        return {
            "name": f"right-guard-recording-{timestamp_ms}",
            "keyvalues": {
                "app": "right-guard",
                "type": "incident-recording",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        }

    def pin(self, file_name: str, data: bytes, content_type: Optional[str]) -> PinnedMedia:
        """Upload one file and return its gateway URL.

        Raises:
            IntegrationError: If credentials are missing or Pinata rejects the upload.
        """

        ipfs = self._settings.ipfs
        if not ipfs.pinata_jwt:
            raise IntegrationError("IPFS credentials are not configured")

        timestamp_ms = int(time.time() * 1000)
        files = {"file": (file_name or "recording.webm", data, content_type or "application/octet-stream")}
        form = {
            "pinataMetadata": json.dumps(self._metadata(timestamp_ms)),
            "pinataOptions": json.dumps({"cidVersion": 0}),
        }
        headers = {"Authorization": f"Bearer {ipfs.pinata_jwt}"}

        owns_client = self._client is None
        http = self._client or httpx.Client(timeout=ipfs.timeout_seconds)
        try:
            response = http.post(ipfs.pin_endpoint, data=form, files=files, headers=headers)
            if response.status_code >= 400:
                raise IntegrationError(f"IPFS upload failed: {response.reason_phrase}")
            payload = response.json()
        except httpx.HTTPError as exc:
            raise IntegrationError(f"IPFS upload failed: {exc}") from exc
        except ValueError as exc:
            raise IntegrationError("IPFS upload returned an unreadable response") from exc
        finally:
            if owns_client:
                http.close()

        content_hash = payload.get("IpfsHash") if isinstance(payload, dict) else None
        if not content_hash:
            raise IntegrationError("IPFS upload response did not include a content hash")

        url = f"{ipfs.gateway_url.rstrip('/')}/ipfs/{content_hash}"
        LOGGER.info("Pinned %s (%s bytes) as %s", file_name, len(data), content_hash)
        return PinnedMedia(content_hash=content_hash, url=url, file_name=file_name, size_bytes=len(data))


__all__ = ["MediaStorage", "PinataStorage", "PinnedMedia"]
