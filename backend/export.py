import logging
from pathlib import Path

import pandas as pd

from scraper.base import FIELDS, TermRecord

logger = logging.getLogger(__name__)


def write_results(records: list[TermRecord], path: str | Path, sheet_name: str = "Results") -> Path:
    """Write records to a single-sheet xlsx workbook with a `rus | en | pl` header."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame([r.as_row() for r in records], columns=list(FIELDS))
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)

    logger.info("Wrote %d records to %s", len(records), path)
    return path
