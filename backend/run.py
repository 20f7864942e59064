"""
Starts the scrape service.

Use this instead of invoking uvicorn directly on Windows: the Proactor loop
policy has to be in place before uvicorn creates its event loop, or Playwright
cannot spawn the browser process.
"""
import asyncio
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

import uvicorn

from config import settings

if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
