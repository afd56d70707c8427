"""API-key issuing and validation against the ``api_keys`` / ``users`` tables.

Only the SHA-256 hash of a key is stored, so lookups hash the presented key.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import UTC, datetime
from typing import Any, cast

from supabase import Client

from chaptergen.config import settings
from chaptergen.errors import AccessDeniedError

logger = logging.getLogger(__name__)

INACTIVE_SUBSCRIPTION_STATUSES = {"canceled", "past_due"}


def generate_api_key() -> str:
    """Return a new random key: configured prefix + 48 hex characters."""
    return f"{settings.api_key_prefix}{secrets.token_hex(24)}"


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def _now() -> str:
    return datetime.now(UTC).isoformat()


def validate_api_key(client: Client, api_key: str | None) -> dict[str, Any] | None:
    """Look up the user that owns *api_key*.

    Returns:
        The user row, or ``None`` if the key is malformed, unknown, revoked,
        or points at a missing user.
    """
    if not api_key or not api_key.strip().startswith(settings.api_key_prefix):
        return None

    key_hash = hash_api_key(api_key.strip())
    result = (
        client.table("api_keys")
        .select("id, user_id, revoked_at")
        .eq("key_hash", key_hash)
        .execute()
    )
    # Supabase .data is typed as JSON (broad union); cast to concrete type.
    keys = cast(list[dict[str, Any]], result.data)
    if not keys or keys[0].get("revoked_at"):
        logger.info("Rejected API key ending %s: not found or revoked", api_key.strip()[-4:])
        return None

    key_row = keys[0]
    client.table("api_keys").update({"last_used_at": _now()}).eq("id", key_row["id"]).execute()

    users = cast(
        list[dict[str, Any]],
        client.table("users").select("*").eq("id", key_row["user_id"]).execute().data,
    )
    if not users:
        logger.warning("API key %s has no matching user", key_row["id"])
        return None
    return users[0]


def authenticate(client: Client, api_key: str | None) -> dict[str, Any]:
    """Resolve *api_key* to an active user.

    Raises:
        AccessDeniedError: Missing, invalid, or revoked key, or inactive subscription.
    """
    if not api_key:
        raise AccessDeniedError("Missing API key. Include x-api-key header.")

    user = validate_api_key(client, api_key)
    if user is None:
        raise AccessDeniedError("Invalid or revoked API key.")

    if user.get("subscription_status") in INACTIVE_SUBSCRIPTION_STATUSES:
        raise AccessDeniedError("Subscription inactive. Please update your billing.")

    return user
