"""
Term scraper.

Walks the requested listing pages and opens every term's detail page in a
fresh tab, one at a time. Between rows the browser state is wiped and a fixed
delay is applied; every `batch_size` rows the scraper takes a longer pause.

A listing page that cannot be loaded aborts the run. A detail page that cannot
be loaded or parsed is logged, recorded as a failure and skipped.
"""
import asyncio
import inspect
import logging

from playwright.async_api import async_playwright, TimeoutError as PWTimeout

from config import Settings
from scraper.base import ListingRow, RowFailure, ScrapeSummary, TermRecord
from scraper.detail import extract_term_record, is_complete
from scraper.listing import build_listing_url, collect_rows, detail_url
from scraper.navigation import clear_browser_data, goto_with_retries

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class TermScraper:
    def __init__(self, settings: Settings, sleep=asyncio.sleep):
        self.settings = settings
        self.sleep = sleep

    async def run(self, on_record=None) -> ScrapeSummary:
        """Scrape every configured listing page.

        `on_record(index, record, url)` is called after each extracted record;
        it may be a plain function or a coroutine function.
        """
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(
                headless=self.settings.headless,
                args=["--disable-blink-features=AutomationControlled"],
            )
            try:
                context = await browser.new_context(user_agent=USER_AGENT)
                listing = await context.new_page()
                return await self.scrape(context, listing, on_record)
            finally:
                await browser.close()

    async def scrape(self, context, listing, on_record=None) -> ScrapeSummary:
        """Run the listing/detail loop on an already open browser context."""
        s = self.settings
        summary = ScrapeSummary()
        next_index = 0

        for page_number in range(s.start_page, s.start_page + s.max_pages):
            url = build_listing_url(s, page_number)
            await self._goto(listing, url)
            logger.info("Opened listing page %d: %s", page_number, url)

            try:
                rows = await collect_rows(listing, start_index=next_index)
            except PWTimeout:
                if page_number == s.start_page:
                    raise
                logger.info("Listing page %d has no rows, stopping.", page_number)
                break

            logger.info("Found %d rows on listing page %d.", len(rows), page_number)
            summary.rows_found += len(rows)
            next_index += len(rows)

            for row in rows:
                await self._process_row(context, listing, row, summary, on_record)

        logger.info(
            "Scrape finished: %d rows, %d records, %d failures, %d without link.",
            summary.rows_found, len(summary.records), len(summary.failures), summary.skipped,
        )
        return summary

    async def _process_row(self, context, listing, row: ListingRow, summary: ScrapeSummary, on_record) -> None:
        s = self.settings
        i = row.index

        if s.batch_size > 0 and i > 0 and i % s.batch_size == 0:
            logger.info("Pausing for %.0f seconds after %d rows.", s.batch_pause_seconds, i)
            await self.sleep(s.batch_pause_seconds)

        if s.reset_every > 0 and i % s.reset_every == 0:
            await clear_browser_data(context, listing)

        if not row.href:
            logger.info("No term details link for row %d.", i + 1)
            summary.skipped += 1
            return

        url = detail_url(s.portal_base_url, row.href)
        record: TermRecord | None = None
        term_page = None
        try:
            term_page = await context.new_page()
            await self._goto(term_page, url)
            logger.info("Detail page for row %d loaded.", i + 1)
            record = await extract_term_record(term_page)
        except Exception as exc:
            logger.error("Could not load page for row %d: %s. Error: %s", i + 1, url, exc)
            summary.failures.append(RowFailure(index=i, url=url, error=str(exc)))
        finally:
            if term_page is not None:
                await term_page.close()
                logger.debug("Detail page for row %d closed.", i + 1)

        if record is not None:
            summary.records.append(record)
            if not is_complete(record):
                logger.info("Row %d is missing one or more terms.", i + 1)
            if on_record is not None:
                result = on_record(i, record, url)
                if inspect.isawaitable(result):
                    await result
            logger.info("Results for row %d added.", i + 1)

        await listing.bring_to_front()
        await self.sleep(s.request_delay_seconds)

    async def _goto(self, page, url: str):
        s = self.settings
        return await goto_with_retries(
            page,
            url,
            retries=s.navigation_retries,
            delay=s.retry_delay_seconds,
            wait_until=s.wait_until,
            timeout=s.navigation_timeout_ms,
            sleep=self.sleep,
        )
