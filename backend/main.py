import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from config import configure_logging
from database import AsyncSessionLocal, get_db, init_db
from jobs.runner import job_settings, mark_interrupted_jobs, run_job
from models import ScrapeJob, TermRecordRow
from scraper.listing import build_listing_url

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# In-memory map of job IDs still running, used to wake the SSE stream early
_active_jobs: dict[str, asyncio.Event] = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    await mark_interrupted_jobs()
    yield


app = FastAPI(title="Euroclass Term Scraper", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class ScrapeRequest(BaseModel):
    search_text: str | None = None
    nice_class: str | None = None
    start_page: int | None = None
    max_pages: int | None = None


class ScrapeResponse(BaseModel):
    job_id: str
    listing_url: str


def _record_dict(r: TermRecordRow) -> dict:
    return {
        "row_index": r.row_index,
        "rus": r.rus,
        "en": r.en,
        "pl": r.pl,
        "source_url": r.source_url,
    }


@app.post("/api/scrape", response_model=ScrapeResponse)
async def create_scrape(
    req: ScrapeRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    if req.start_page is not None and req.start_page < 1:
        raise HTTPException(400, "start_page must be 1 or greater")
    if req.max_pages is not None and req.max_pages < 1:
        raise HTTPException(400, "max_pages must be 1 or greater")

    # Only one scrape may be pending or running
    busy = await db.execute(
        select(ScrapeJob).where(ScrapeJob.status.in_(("pending", "running")))
    )
    if busy.scalars().first() is not None:
        raise HTTPException(409, "A scrape is already running")

    overrides = req.model_dump(exclude_none=True)
    cfg = job_settings(overrides)
    job = ScrapeJob(listing_url=build_listing_url(cfg, cfg.start_page), status="pending")
    db.add(job)
    await db.commit()
    await db.refresh(job)

    done_event = asyncio.Event()
    _active_jobs[job.id] = done_event

    background_tasks.add_task(_run_and_signal, job.id, overrides, done_event)

    return ScrapeResponse(job_id=job.id, listing_url=job.listing_url)


async def _run_and_signal(job_id: str, overrides: dict, done_event: asyncio.Event):
    try:
        await run_job(job_id, overrides)
    finally:
        done_event.set()
        _active_jobs.pop(job_id, None)


async def job_events(job_id: str, done_event: asyncio.Event | None = None, poll_interval: float = 1.0):
    """Yield SSE events for a job: stored records as they appear, then `done`."""
    sent_ids: set[str] = set()

    while True:
        async with AsyncSessionLocal() as db:
            job = await db.get(ScrapeJob, job_id)
            if job is None:
                yield {"event": "error", "data": json.dumps({"message": "Job not found"})}
                return

            result = await db.execute(
                select(TermRecordRow)
                .where(TermRecordRow.job_id == job_id)
                .order_by(TermRecordRow.row_index)
            )
            for row in result.scalars().all():
                if row.id not in sent_ids:
                    sent_ids.add(row.id)
                    yield {"event": "record", "data": json.dumps(_record_dict(row))}

            if job.status in ("complete", "error"):
                yield {
                    "event": "done",
                    "data": json.dumps({
                        "status": job.status,
                        "records_written": job.records_written,
                        "failures": job.failures,
                        "error": job.error,
                    }),
                }
                return

        # Wake early if the job signals completion
        if done_event:
            try:
                await asyncio.wait_for(asyncio.shield(done_event.wait()), timeout=poll_interval)
            except asyncio.TimeoutError:
                pass
        else:
            await asyncio.sleep(poll_interval)


@app.get("/api/jobs/{job_id}/stream")
async def stream_results(job_id: str):
    """SSE endpoint: streams term records as the scraper stores them."""
    return EventSourceResponse(job_events(job_id, _active_jobs.get(job_id)))


@app.get("/api/jobs/{job_id}")
async def get_job(job_id: str, db: AsyncSession = Depends(get_db)):
    job = await db.get(ScrapeJob, job_id)
    if not job:
        raise HTTPException(404, "Job not found")

    records = await db.execute(
        select(TermRecordRow)
        .where(TermRecordRow.job_id == job_id)
        .order_by(TermRecordRow.row_index)
    )

    return {
        "job_id": job.id,
        "status": job.status,
        "listing_url": job.listing_url,
        "rows_found": job.rows_found,
        "records_written": job.records_written,
        "failures": job.failures,
        "error": job.error,
        "created_at": job.created_at.isoformat(),
        "completed_at": job.completed_at.isoformat() if job.completed_at else None,
        "records": [_record_dict(r) for r in records.scalars().all()],
    }


@app.get("/api/jobs/{job_id}/export")
async def export_job(job_id: str, db: AsyncSession = Depends(get_db)):
    job = await db.get(ScrapeJob, job_id)
    if not job:
        raise HTTPException(404, "Job not found")
    if job.status != "complete" or not job.output_path:
        raise HTTPException(409, f"Job is {job.status}; no spreadsheet available")
    if not Path(job.output_path).exists():
        raise HTTPException(404, "Spreadsheet file is missing")

    return FileResponse(job.output_path, media_type=XLSX_MEDIA_TYPE, filename=f"results-{job_id}.xlsx")
