"""Hash helpers used for visitor ids and cookie names."""

import hashlib


def sha1_hex(value: str) -> str:
    """Lowercase hex SHA-1 of the UTF-8 bytes of ``value``."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def md5_hex(value: str) -> str:
    """Lowercase hex MD5 of the UTF-8 bytes of ``value``."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()
