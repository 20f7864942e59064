"""
Scrape job runner.
Runs the term scraper for one job and writes each record to the database as
soon as it is extracted so the SSE stream can push it live. The spreadsheet is
written once the scrape has finished.
"""
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import select

from config import Settings, settings
from database import AsyncSessionLocal
from export import write_results
from models import ScrapeJob, TermRecordRow
from scraper.base import TermRecord
from scraper.runner import TermScraper

logger = logging.getLogger(__name__)


def job_settings(overrides: dict | None = None) -> Settings:
    """Module settings with the non-empty per-job overrides applied."""
    update = {k: v for k, v in (overrides or {}).items() if v is not None}
    return settings.model_copy(update=update)


def export_path(cfg: Settings, job_id: str) -> Path:
    return Path(cfg.export_dir) / f"{job_id}.xlsx"


async def mark_interrupted_jobs() -> int:
    """Fail jobs left pending or running by a previous process.

    Called once at startup, before any job of this process exists.
    """
    async with AsyncSessionLocal() as db:
        result = await db.execute(
            select(ScrapeJob).where(ScrapeJob.status.in_(("pending", "running")))
        )
        jobs = result.scalars().all()
        for job in jobs:
            job.status = "error"
            job.error = "Interrupted: the service stopped before the job finished."
            job.completed_at = datetime.now(timezone.utc)
        await db.commit()

    if jobs:
        logger.warning("Marked %d interrupted job(s) as error", len(jobs))
    return len(jobs)


async def run_job(job_id: str, overrides: dict | None = None, scraper_cls=TermScraper) -> None:
    cfg = job_settings(overrides)

    async def store(index: int, record: TermRecord, url: str) -> None:
        async with AsyncSessionLocal() as db:
            db.add(TermRecordRow(job_id=job_id, row_index=index, source_url=url, **record.as_row()))
            await db.commit()

    try:
        async with AsyncSessionLocal() as db:
            job = await db.get(ScrapeJob, job_id)
            job.status = "running"
            await db.commit()

        summary = await scraper_cls(cfg).run(on_record=store)
        loop = asyncio.get_running_loop()
        path = await loop.run_in_executor(
            None, write_results, summary.records, export_path(cfg, job_id), cfg.sheet_name
        )
    except Exception as exc:
        logger.error("[job %s] error: %s", job_id, exc)
        async with AsyncSessionLocal() as db:
            job = await db.get(ScrapeJob, job_id)
            job.status = "error"
            job.error = f"{type(exc).__name__}: {exc}"
            job.completed_at = datetime.now(timezone.utc)
            await db.commit()
        return

    async with AsyncSessionLocal() as db:
        job = await db.get(ScrapeJob, job_id)
        job.status = "complete"
        job.rows_found = summary.rows_found
        job.records_written = len(summary.records)
        job.failures = len(summary.failures)
        job.output_path = str(path)
        job.completed_at = datetime.now(timezone.utc)
        await db.commit()
    logger.info("[job %s] complete: %d records", job_id, len(summary.records))
