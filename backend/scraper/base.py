from dataclasses import dataclass, field

FIELDS = ("rus", "en", "pl")


def missing_text(field_name: str) -> str:
    return f"No {field_name} text found"


@dataclass
class TermRecord:
    """One term as read from its detail page."""
    rus: str = missing_text("rus")  # master title in the search language
    en: str = missing_text("en")
    pl: str = missing_text("pl")

    def as_row(self) -> dict[str, str]:
        return {"rus": self.rus, "en": self.en, "pl": self.pl}


@dataclass
class ListingRow:
    """A single row of a listing table."""
    index: int               # position across every listing page of the run
    href: str | None = None  # relative detail link, None when the row has none


@dataclass
class RowFailure:
    index: int
    url: str
    error: str


@dataclass
class ScrapeSummary:
    rows_found: int = 0
    records: list[TermRecord] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)
    skipped: int = 0  # rows without a detail link
