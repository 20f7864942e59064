"""
Page loading helpers shared by the listing and detail steps.

The portal throttles and occasionally drops connections, so every navigation
goes through a fixed-count retry loop with a static backoff. Browser state is
wiped between rows through a CDP session; this only works on Chromium.
"""
import asyncio
import logging

logger = logging.getLogger(__name__)


async def goto_with_retries(
    page,
    url: str,
    *,
    retries: int = 3,
    delay: float = 5.0,
    wait_until: str = "networkidle",
    timeout: int = 0,
    sleep=asyncio.sleep,
):
    """Navigate `page` to `url`, retrying up to `retries` times.

    Waits `delay` seconds between attempts. The error of the last attempt is
    re-raised to the caller.
    """
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            return await page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as exc:
            logger.warning("Failed to load %s: %s. Attempt %d of %d.", url, exc, attempt, attempts)
            if attempt == attempts:
                raise
            await sleep(delay)


async def clear_browser_data(context, page) -> None:
    """Drop cookies, HTTP cache and storage for every origin."""
    client = await context.new_cdp_session(page)
    try:
        await client.send("Network.clearBrowserCookies")
        await client.send("Network.clearBrowserCache")
        await client.send(
            "Storage.clearDataForOrigin",
            {"origin": "*", "storageTypes": "all"},
        )
    finally:
        await client.detach()
