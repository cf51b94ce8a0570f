from __future__ import annotations

import asyncio

import aiohttp

from aocbot.errors import FetchError


def leaderboard_json_url(base_url: str, year: str, leaderboard_id: str) -> str:
    return f"{base_url.rstrip('/')}/{year}/leaderboard/private/view/{leaderboard_id}.json"


async def fetch_leaderboard(
    http: aiohttp.ClientSession,
    base_url: str,
    year: str,
    leaderboard_id: str,
    session_token: str,
    timeout: float = 30,
    user_agent: str | None = None,
) -> bytes:
    url = leaderboard_json_url(base_url, year, leaderboard_id)
    headers = {"Cookie": f"session={session_token}"}
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        # An expired session redirects to the login page instead of failing.
        async with http.get(
            url,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=False,
        ) as resp:
            if resp.status != 200:
                raise FetchError(f"leaderboard request returned HTTP {resp.status}")
            return await resp.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise FetchError(f"error downloading leaderboard: {exc!r}") from exc
