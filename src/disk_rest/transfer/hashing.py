"""Content digests used to validate resumed uploads."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass

from ..errors import DiskLocalIOError
from ._helpers import get_chunk_size


@dataclass(frozen=True, slots=True)
class ContentDigest:
    """MD5 and SHA-256 hex digests of a file's bytes, plus its length."""

    md5: str
    sha256: str
    size: int

    def as_headers(self) -> dict[str, str]:
        return {
            "Etag": self.md5,
            "Sha256": self.sha256,
            "Size": str(self.size),
        }


def digest_file(path: str | os.PathLike, chunk_size: int | None = None) -> ContentDigest:
    """Hash a local file in one sequential pass.

    Only the byte content is hashed, so two files with the same bytes produce
    the same digest whatever their names, timestamps or permissions.

    Raises:
        DiskLocalIOError: If the file cannot be opened or read.
    """
    size = get_chunk_size(chunk_size)
    md5 = hashlib.md5()
    sha256 = hashlib.sha256()
    total = 0
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(size)
                if not chunk:
                    break
                md5.update(chunk)
                sha256.update(chunk)
                total += len(chunk)
    except OSError as exc:
        raise DiskLocalIOError(f"cannot read {os.fspath(path)!r}: {exc}") from exc
    return ContentDigest(md5=md5.hexdigest(), sha256=sha256.hexdigest(), size=total)


__all__ = ["ContentDigest", "digest_file"]
