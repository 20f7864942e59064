"""
One-shot scrape: walk the configured listing pages and write the spreadsheet.

    python scrape.py

Every setting in config.py can be overridden through the environment or
../.env, e.g. MAX_PAGES=5 OUTPUT_PATH=terms.xlsx python scrape.py
"""
import asyncio
import logging
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

from config import Settings, configure_logging, settings
from export import write_results
from scraper.runner import TermScraper

logger = logging.getLogger("scrape")


async def scrape(cfg: Settings, scraper_cls=TermScraper) -> int:
    try:
        summary = await scraper_cls(cfg).run()
        for record in summary.records:
            logger.info("%s | %s | %s", record.rus, record.en, record.pl)
        path = write_results(summary.records, cfg.output_path, cfg.sheet_name)
    except Exception as exc:
        logger.error("Scrape failed: %s", exc)
        return 1

    logger.info("Results written to %s", path)
    return 0


def main() -> int:
    configure_logging(settings.log_level)
    return asyncio.run(scrape(settings))


if __name__ == "__main__":
    sys.exit(main())
