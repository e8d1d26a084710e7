import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")
_DAYS_RE = re.compile(r"(\d+)\s*day")
_HOURS_RE = re.compile(r"(\d+)\s*hour")
_MINUTES_RE = re.compile(r"(\d+)\s*minute")


@dataclass
class JobRecord:
    """
    One job posting as observed on a listing page.

    Records carry no timestamps; created_at/updated_at are added by the
    index. Text fields are always strings (possibly empty) and
    posted_age_days is None when the age could not be parsed.
    """
    id: str
    job_url: str
    company: str = ""
    company_site: str = ""
    job_title: str = ""
    apply_url: str = ""
    location: str = ""
    experience: str = ""
    posted: str = ""
    posted_age_days: int | None = None
    logo: str = ""
    company_size: str = ""
    funding_tags: list[str] = field(default_factory=list)
    industries: list[str] = field(default_factory=list)
    what_they_do: str = ""
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def normalize_space(text: str | None) -> str:
    """Collapse internal whitespace and trim. None becomes an empty string."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def stable_id(job_url: str | None) -> str:
    """Identity of a posting: its job-detail URL, trimmed."""
    return (job_url or "").strip()


def parse_posted_age_days(posted_text: str | None) -> int | None:
    """
    Turn free-form "posted" text into an age in days.

    Examples:
        "Posted today" -> 0
        "3 days ago"   -> 3
        "2 hours ago"  -> 0
        ""             -> None
    """
    text = normalize_space(posted_text).lower()
    if not text:
        return None

    if "today" in text:
        return 0

    match = _DAYS_RE.search(text)
    if match:
        return int(match.group(1))

    if _HOURS_RE.search(text) or _MINUTES_RE.search(text):
        return 0

    return None


def dedupe_records(records: list[JobRecord]) -> list[JobRecord]:
    """Drop records with an empty id and repeated ids; first occurrence wins."""
    seen: set[str] = set()
    unique: list[JobRecord] = []
    for record in records:
        if not record.id or record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


class BaseParser(ABC):
    """
    Abstract base class for listing-page parsers.

    Each parser handles the markup of a specific site. Subclasses must
    implement parse_list, which must never raise on malformed markup.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """
        Initialize the parser with optional configuration.

        Args:
            config: Parser-specific configuration (e.g., CSS selector overrides)
        """
        self.config = config or {}

    @abstractmethod
    def parse_list(self, html: str, source_url: str) -> list[JobRecord]:
        """
        Parse one listing page and extract its job records.

        Args:
            html: Raw HTML content of the listing page
            source_url: Listing URL recorded as each record's source

        Returns:
            Records in page order, deduplicated by id
        """
        pass
