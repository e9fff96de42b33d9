"""
audioscribe.source - Audio source acquisition.

Loads audio bytes from a local file, or from a remote URL either directly
or through the audio proxy endpoint served by ``audioscribe serve``.
"""

from __future__ import annotations

import mimetypes
import os
import tempfile
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from audioscribe.exceptions import SourceError
from audioscribe.logging import get_logger
from audioscribe.models import AudioSource

log = get_logger("source")

FALLBACK_MIME_TYPE = "application/octet-stream"
PROXY_PATH = "/api/proxy-audio"

mimetypes.add_type("audio/mp4", ".m4a")
mimetypes.add_type("audio/aac", ".aac")


def guess_mime_type(name: str) -> str:
    """Guess an audio MIME type from a file name or URL path."""
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or FALLBACK_MIME_TYPE


def load_file(path: Path) -> AudioSource:
    """Read a local audio file into memory.

    Raises:
        SourceError: If the path is empty, missing, or unreadable
    """
    if not str(path).strip():
        raise SourceError("No file selected")
    if not path.is_file():
        raise SourceError(f"Audio file not found: {path}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceError(f"Could not read {path}: {e}") from e

    return AudioSource(
        data=data,
        mime_type=guess_mime_type(path.name),
        name=path.name,
        origin=str(path),
    )


def proxy_request_url(proxy_base: str, url: str) -> httpx.URL:
    """Build the proxy endpoint URL for a remote audio URL."""
    return httpx.URL(proxy_base.rstrip("/") + PROXY_PATH, params={"url": url})


def _name_from_url(url: str) -> str:
    path = unquote(urlparse(url).path)
    return os.path.basename(path) or "audio"


def fetch_url(
    url: str,
    proxy_base: str | None = None,
    client: httpx.Client | None = None,
    timeout: float = 60.0,
) -> AudioSource:
    """Download audio from a URL.

    Args:
        url: Remote audio URL
        proxy_base: Base URL of an audioscribe server; when set, the audio is
            fetched through its proxy endpoint instead of directly
        client: Optional httpx client (tests inject one with a mock transport)
        timeout: Request timeout in seconds

    Raises:
        SourceError: If the URL is empty or the download fails
    """
    if not url or not url.strip():
        raise SourceError("URL is required")
    url = url.strip()

    target = proxy_request_url(proxy_base, url) if proxy_base else httpx.URL(url)
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)

    try:
        log.debug("Fetching audio from %s", target)
        response = client.get(target)
    except httpx.HTTPError as e:
        raise SourceError(f"Failed to fetch audio from {url}: {e}") from e
    finally:
        if owns_client:
            client.close()

    if not response.is_success:
        raise SourceError(f"Failed to fetch audio from {url}: HTTP {response.status_code}")

    content_type = response.headers.get("content-type", "")
    mime_type = content_type.split(";", 1)[0].strip()
    name = _name_from_url(url)
    if not mime_type:
        mime_type = guess_mime_type(name)

    return AudioSource(data=response.content, mime_type=mime_type, name=name, origin=url)


def load_source(location: str, proxy_base: str | None = None) -> AudioSource:
    """Load audio from a path or an http(s) URL."""
    if location.startswith(("http://", "https://")):
        return fetch_url(location, proxy_base=proxy_base)
    return load_file(Path(location).expanduser())


def create_playback_file(source: AudioSource) -> Path:
    """Write the source to a temp file a player can open.

    The caller owns the file and must release it with release_playback_file.
    """
    fd, name = tempfile.mkstemp(prefix="audioscribe-", suffix=f".{source.extension}")
    with os.fdopen(fd, "wb") as f:
        f.write(source.data)
    source.playback_path = name
    return Path(name)


def release_playback_file(source: AudioSource | None) -> None:
    """Delete the playback temp file of a source, if it has one."""
    if source is None or not source.playback_path:
        return
    Path(source.playback_path).unlink(missing_ok=True)
    source.playback_path = None
