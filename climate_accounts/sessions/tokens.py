"""
Session tokens and content digests.

A session token is an opaque identifier: it names the session and is used
as the cache key and as the pointer on the user record. It is *not* derived
from the projection, so the projection can be repaired in place without
the key changing under anyone's feet.

What is derived from the projection is the content digest, a SHA-256 over
its canonical JSON encoding. The digest is stored alongside the projection
in the cache and lets the reconciler tell a damaged or foreign entry from
one it wrote itself.
"""

import hashlib
import json
import secrets

from ..domain import SessionProjection

TOKEN_BYTES = 32
"""Tokens are 64 hex characters, the same length as a SHA-256 digest."""


def new_session_token() -> str:
    """Generate a new opaque session token."""
    return secrets.token_hex(TOKEN_BYTES)


def canonical_json(user: dict) -> bytes:
    """Deterministic JSON encoding of a projection's wire representation."""
    return json.dumps(user, sort_keys=True, separators=(',', ':'),
                      ensure_ascii=False).encode('utf-8')


def content_digest(user: dict) -> str:
    """SHA-256 hex digest of :func:`canonical_json`."""
    return hashlib.sha256(canonical_json(user)).hexdigest()


def derive(projection: SessionProjection) -> str:
    """Digest of a :class:`.SessionProjection`; same input, same output."""
    return content_digest(projection.to_dict())
