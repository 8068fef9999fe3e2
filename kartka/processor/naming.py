"""Deterministic names shared by the scan and hydrate pipelines.

A scanned file becomes a remote key `<sanitized stem>-<8 hex sha256><suffix>`
and the key becomes an index entry `<percent-encoded key>.txt`. Hydrate only
knows the key, so the entry name must be derivable from the key alone.
"""

import hashlib
import re
from pathlib import Path
from urllib.parse import quote, unquote

INDEX_ENTRY_SUFFIX = ".txt"
DIGEST_LENGTH = 8

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_CHUNK_SIZE = 1024 * 1024


def sanitize_stem(stem: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", stem).strip("._")
    return cleaned or "document"


def content_digest(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()[:DIGEST_LENGTH]


def remote_key_for(path: Path, suffix: str | None = None) -> str:
    """Remote key for a scanned file; `suffix` overrides the file's own extension."""
    extension = (suffix if suffix is not None else path.suffix).lower()
    return f"{sanitize_stem(path.stem)}-{content_digest(path)}{extension}"


def index_entry_name(remote_key: str) -> str:
    return quote(remote_key, safe="") + INDEX_ENTRY_SUFFIX


def remote_key_from_entry(entry_name: str) -> str:
    if not entry_name.endswith(INDEX_ENTRY_SUFFIX):
        raise ValueError(f"not an index entry name: '{entry_name}'")
    return unquote(entry_name[: -len(INDEX_ENTRY_SUFFIX)])


def is_hidden(name: str) -> bool:
    return Path(name).name.startswith(".")
