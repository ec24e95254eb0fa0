from __future__ import annotations

import hashlib
import json


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_text(text: str) -> str:
    return hash_bytes(text.encode("utf-8"))


def dump_json(data: object) -> str:
    """Serialize ``data`` the same way on every build so hashes stay stable."""
    return json.dumps(data, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
