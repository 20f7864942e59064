"""
Search results listing.

Each result row links to its term page through `td.termDetails a`; the href
is relative to the portal root.
"""
from urllib.parse import urlencode, urljoin

from config import Settings
from scraper.base import ListingRow

ROW_SELECTOR = "tbody tr"
DETAIL_LINK = "td.termDetails a"


def build_listing_url(settings: Settings, page_number: int) -> str:
    query = urlencode({
        "language": settings.search_language,
        "text": settings.search_text,
        "niceClass": settings.nice_class,
        "size": settings.page_size,
        "page": page_number,
        "officeList": settings.office_list,
        "searchMode": settings.search_mode,
        "sortBy": settings.sort_by,
    })
    return f"{settings.portal_base_url.rstrip('/')}{settings.search_path}?{query}"


def detail_url(base_url: str, href: str) -> str:
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url.rstrip("/") + "/", href.lstrip("/"))


async def collect_rows(page, start_index: int = 0) -> list[ListingRow]:
    """Read every result row of the listing page currently loaded in `page`."""
    await page.wait_for_selector(ROW_SELECTOR)

    rows: list[ListingRow] = []
    for offset, row in enumerate(await page.locator(ROW_SELECTOR).all()):
        link = row.locator(DETAIL_LINK)
        href = None
        if await link.count() > 0:
            href = await link.first.get_attribute("href")
        rows.append(ListingRow(index=start_index + offset, href=href or None))
    return rows
