"""Metadata fingerprints used for change detection."""

import hashlib
from datetime import datetime


def compute_fingerprint(name: str, created: datetime, modified: datetime, size: int) -> str:
    """Compute an MD5 hex digest over a file's name, timestamps and size.

    File content is never read: a change is only noticed when one of these
    metadata values changes.
    """
    data = f"{name}|{created.isoformat()}|{modified.isoformat()}|{size}"
    return hashlib.md5(data.encode("utf-8")).hexdigest()
