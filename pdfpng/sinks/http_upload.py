"""Sink uploading artifacts to a save-file endpoint."""

import logging
from typing import Optional

import httpx

from .base import ArtifactSink
from ..config import get_config
from ..exceptions import SinkFailure

logger = logging.getLogger(__name__)


def content_type_for(extension: str) -> str:
    """MIME type of a rendered image extension."""
    extension = extension.lower().lstrip(".")
    if extension == "jpg":
        extension = "jpeg"
    return f"image/{extension}"


def check_upload_url(url: str) -> str:
    """
    Validate a client-chosen upload URL against ``SAVE_URL_ALLOWLIST``.

    Raises:
        ValueError: If an allowlist is configured and the URL matches no prefix
    """
    allowed = [p.strip() for p in get_config().save.allowed_upload_urls.split(",") if p.strip()]
    if allowed and not any(url.startswith(prefix) for prefix in allowed):
        raise ValueError(f"Upload URL '{url}' is not allowed")
    return url


class HttpUploadSink(ArtifactSink):
    """
    POSTs each artifact as multipart form data.

    Fields: ``file`` (the bytes), ``filename`` and, when set, ``outputDir``.
    The endpoint answers ``{"success": true, "path": ...}`` or
    ``{"error": ...}`` with status 400/500.
    """

    def __init__(
        self,
        url: str,
        output_dir: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        content_type: str = "image/png",
    ):
        self.url = url
        self.output_dir = output_dir.strip() if output_dir else None
        self.content_type = content_type
        self._client = client or httpx.Client(timeout=get_config().save.upload_timeout)
        self._owns_client = client is None

    def save(self, name: str, data: bytes) -> str:
        form = {"filename": name}
        if self.output_dir:
            form["outputDir"] = self.output_dir

        try:
            response = self._client.post(
                self.url,
                files={"file": (name, data, self.content_type)},
                data=form,
            )
        except httpx.HTTPError as e:
            raise SinkFailure(f"Failed to save file: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        if response.status_code != 200 or not body.get("success"):
            error = body.get("error")
            raise SinkFailure(error or f"Failed to save file (HTTP {response.status_code})")

        path = body.get("path", name)
        logger.debug(f"Uploaded {name} -> {path}")
        return path

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
