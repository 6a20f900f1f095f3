"""Storage Paths — object names for uploaded growth-record images.

Invariants:
    - Object name is <folder>/<uuid4 hex><original extension>, extension case kept
    - Folder never contains "..", empty segments, or leading/trailing slashes
    - Missing or fully-stripped folder falls back to "uploads"
    - URLs carry each path segment percent-encoded; object_path_from_public_url
      decodes them back into the object name
"""

import posixpath
import uuid
from urllib.parse import quote, unquote

DEFAULT_FOLDER = "uploads"


def sanitize_folder(folder: str | None) -> str:
    if not folder:
        return DEFAULT_FOLDER
    parts = [
        p for p in folder.replace("\\", "/").split("/")
        if p and p not in (".", "..")
    ]
    return "/".join(parts) or DEFAULT_FOLDER


def build_object_path(
    filename: str | None, folder: str | None = None, token: str | None = None,
) -> str:
    """Build a unique object path that keeps the original file extension."""
    ext = posixpath.splitext(filename or "")[1]
    token = token or uuid.uuid4().hex
    return f"{sanitize_folder(folder)}/{token}{ext}"


def quote_object_path(path: str) -> str:
    """Percent-encode each segment so ?, # and % stay part of the name."""
    return "/".join(quote(segment, safe="") for segment in path.split("/"))


def object_path_from_public_url(url: str, bucket: str) -> str | None:
    """Recover the object path from a public URL in `bucket`; None if foreign."""
    marker = f"/storage/v1/object/public/{bucket}/"
    _, found, path = url.partition(marker)
    path = path.split("?", 1)[0].split("#", 1)[0]
    if not found or not path:
        return None
    return unquote(path)
