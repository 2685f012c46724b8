"""Fetching archives and metadata descriptors from local or remote locations."""

from __future__ import annotations

import codecs
import re
import shutil
from pathlib import Path
from urllib.error import URLError
from urllib.parse import unquote, urlparse
from urllib.request import urlopen

from .errors import AcquisitionError
from .logging import get_logger
from .models import LocalArchive

DOWNLOADED_ARCHIVE_NAME = "downloaded.jar"

_XML_ENCODING = re.compile(rb"""^\s*<\?xml[^>]*?\sencoding\s*=\s*["']([A-Za-z0-9._:-]+)["']""")

_logger = get_logger("acquire")


def is_remote(location: str) -> bool:
    """Return True when ``location`` carries a network host component."""
    return bool(urlparse(location).hostname)


def local_path(location: str) -> Path:
    """Map a bare path or ``file:`` URI onto a filesystem path."""
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(location).expanduser()


def download_path(target_dir: Path) -> Path:
    """Where a remote archive for ``target_dir`` is staged; always outside it."""
    return target_dir.parent / f"{target_dir.name}-{DOWNLOADED_ARCHIVE_NAME}"


def fetch_archive(location: str, target_dir: Path, *, timeout: float = 60.0) -> LocalArchive:
    """Make the archive at ``location`` available on local disk.

    Remote archives are streamed next to ``target_dir`` (see
    :func:`download_path`) so extraction can never overwrite them; local ones
    are used in place and never copied.
    """
    if is_remote(location):
        destination = download_path(target_dir)
        destination.parent.mkdir(parents=True, exist_ok=True)
        _logger.info("Downloading remote jar %s", location)
        try:
            with urlopen(location, timeout=timeout) as response, destination.open("wb") as out:
                shutil.copyfileobj(response, out)
        except (URLError, OSError) as exc:
            destination.unlink(missing_ok=True)
            raise AcquisitionError(f"failed to download {location}: {exc}") from exc
        return LocalArchive(path=destination, downloaded=True)

    path = local_path(location)
    if not path.is_file():
        raise AcquisitionError(f"archive not found: {path}")
    return LocalArchive(path=path, downloaded=False)


def decode_descriptor(raw: bytes) -> str:
    """Decode descriptor bytes using the encoding named in the XML declaration.

    Undeclared or unknown encodings fall back to UTF-8; undecodable bytes are
    replaced rather than failing the run.
    """
    if raw.startswith(codecs.BOM_UTF8):
        return raw[len(codecs.BOM_UTF8):].decode("utf-8", errors="replace")

    encoding = "utf-8"
    match = _XML_ENCODING.match(raw[:256])
    if match:
        declared = match.group(1).decode("ascii")
        try:
            encoding = codecs.lookup(declared).name
        except LookupError:
            _logger.warning("Unknown descriptor encoding %s, using utf-8", declared)
    return raw.decode(encoding, errors="replace")


def read_metadata(location: str, *, timeout: float = 60.0) -> str:
    """Return the text of the metadata descriptor at ``location``."""
    if is_remote(location):
        _logger.debug("Fetching remote descriptor %s", location)
        try:
            with urlopen(location, timeout=timeout) as response:
                raw = response.read()
        except (URLError, OSError) as exc:
            raise AcquisitionError(f"failed to download {location}: {exc}") from exc
        return decode_descriptor(raw)

    path = local_path(location)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise AcquisitionError(f"failed to read descriptor {path}: {exc}") from exc
    return decode_descriptor(raw)


__all__ = [
    "DOWNLOADED_ARCHIVE_NAME",
    "decode_descriptor",
    "download_path",
    "fetch_archive",
    "is_remote",
    "local_path",
    "read_metadata",
]
