"""
Term detail page.

The master title holds the term in the search language. Translations sit in
`.detailsTable`, one row per language: cell 0 is the language code and
cell 2 the term. Rows with three cells or fewer are not translation rows.
"""
from scraper.base import TermRecord, missing_text

MASTER_TITLE = ".span10.english_master_title h4"
DETAILS_ROWS = ".detailsTable tr"

TRANSLATION_FIELDS = {"en": "en", "pl": "pl"}


async def _text(locator) -> str:
    return ((await locator.text_content()) or "").strip()


async def extract_term_record(page) -> TermRecord:
    record = TermRecord()

    master = page.locator(MASTER_TITLE)
    if await master.count() > 0:
        record.rus = await _text(master.first)

    for row in await page.locator(DETAILS_ROWS).all():
        cells = await row.locator("td").all()
        if len(cells) <= 3:
            continue
        lang = await _text(cells[0])
        field_name = TRANSLATION_FIELDS.get(lang)
        if field_name:
            setattr(record, field_name, await _text(cells[2]))

    return record


def is_complete(record: TermRecord) -> bool:
    """True when every field came from the page rather than a placeholder."""
    return all(
        getattr(record, name) != missing_text(name)
        for name in ("rus", *TRANSLATION_FIELDS.values())
    )
