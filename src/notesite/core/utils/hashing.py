"""SHA-256 content hashing for index change detection"""

import hashlib


def sha256(content: str | bytes) -> str:
    """Return the hex SHA-256 of content; str is hashed as UTF-8."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()
