from __future__ import annotations

import asyncio

import aiohttp
from loguru import logger

from aocbot.errors import NotifyError


async def send_notification(
    http: aiohttp.ClientSession,
    webhook_url: str,
    text: str,
    timeout: float = 30,
) -> None:
    """POST ``{"text": text}`` to the webhook. Delivery is attempted once."""
    logger.debug("Sending notification: {}", text)
    try:
        async with http.post(
            webhook_url,
            json={"text": text},
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            if resp.status != 200:
                raise NotifyError(f"webhook returned HTTP {resp.status}")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise NotifyError(f"error posting to webhook: {exc!r}") from exc
