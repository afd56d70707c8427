"""Per-user generation quota backed by the ``ai_usage`` table."""

from __future__ import annotations

from dataclasses import dataclass

from postgrest import CountMethod
from supabase import Client

from chaptergen.config import settings
from chaptergen.errors import UsageLimitError

TOOL_NAME = "chaptergen"


@dataclass
class UsageCheck:
    """Outcome of a quota check. ``limit`` is ``None`` for subscribers."""

    allowed: bool
    used: int
    limit: int | None
    subscribed: bool


def count_usage(client: Client, user_id: str, tool: str = TOOL_NAME) -> int:
    result = (
        client.table("ai_usage")
        .select("id", count=CountMethod.exact)
        .eq("user_id", user_id)
        .eq("tool", tool)
        .execute()
    )
    return result.count or 0


def check_usage(
    client: Client,
    user_id: str,
    subscribed: bool,
    tool: str = TOOL_NAME,
) -> UsageCheck:
    """Check whether the user may run another generation.

    Subscribers are unlimited; everyone else gets ``settings.free_generation_limit``
    generations in total.
    """
    used = count_usage(client, user_id, tool)
    if subscribed:
        return UsageCheck(allowed=True, used=used, limit=None, subscribed=True)

    limit = settings.free_generation_limit
    return UsageCheck(allowed=used < limit, used=used, limit=limit, subscribed=False)


def record_usage(client: Client, user_id: str, tool: str = TOOL_NAME) -> None:
    client.table("ai_usage").insert({"user_id": user_id, "tool": tool}).execute()


def require_usage(
    client: Client,
    user_id: str,
    subscribed: bool,
    tool: str = TOOL_NAME,
) -> UsageCheck:
    """Like :func:`check_usage`, but raise once the free quota is spent.

    Raises:
        UsageLimitError: The user is not subscribed and has no generations left.
    """
    usage = check_usage(client, user_id, subscribed, tool)
    if not usage.allowed:
        limit = usage.limit or 0
        raise UsageLimitError(
            f"You've used all {limit} free ChapterGen generations. "
            "Subscribe for unlimited access.",
            used=usage.used,
            limit=limit,
        )
    return usage
