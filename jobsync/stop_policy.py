"""
Stop conditions for the page loop.

Both policies assume the listing is ordered newest-first: once a page
holds nothing fresh (or something too old), later pages cannot do better.
Pinned or promoted postings break that assumption and end a run early.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple

from jobsync.parsers.base import JobRecord

FRESH_MAX_AGE_DAYS = 1


class StopDecision(NamedTuple):
    stop: bool
    reason: str = ""


CONTINUE = StopDecision(stop=False)
NO_CARDS = StopDecision(stop=True, reason="no_cards")


class StopPolicy(ABC):
    """Decides after each page whether to keep paginating."""

    def evaluate(self, records: list[JobRecord]) -> StopDecision:
        # An empty page means the end of the listing or broken selectors.
        if not records:
            return NO_CARDS
        return self._evaluate_page(records)

    @abstractmethod
    def _evaluate_page(self, records: list[JobRecord]) -> StopDecision:
        pass


class TodayPolicy(StopPolicy):
    """Incremental sync: continue while a page shows a posting <= 1 day old."""

    def _evaluate_page(self, records: list[JobRecord]) -> StopDecision:
        has_recent = any(
            r.posted_age_days is not None and r.posted_age_days <= FRESH_MAX_AGE_DAYS
            for r in records
        )
        if not has_recent:
            return StopDecision(stop=True, reason=f"no_recent_<=_{FRESH_MAX_AGE_DAYS}_day_on_page")
        return CONTINUE


class BackfillPolicy(StopPolicy):
    """Historical crawl: stop once a page's oldest known posting is past the cutoff."""

    def __init__(self, max_age_days: int):
        self.max_age_days = max_age_days

    def _evaluate_page(self, records: list[JobRecord]) -> StopDecision:
        ages = [r.posted_age_days for r in records if r.posted_age_days is not None]
        # No parsable ages: keep going rather than risk missing postings.
        if not ages:
            return CONTINUE
        if max(ages) > self.max_age_days:
            return StopDecision(stop=True, reason=f"older_than_{self.max_age_days}")
        return CONTINUE


def get_stop_policy(mode: str, max_age_days: int) -> StopPolicy:
    """
    Get the stop policy for a crawl mode.

    Raises:
        ValueError: If mode is not 'today' or 'all'
    """
    if mode == "today":
        return TodayPolicy()
    if mode == "all":
        return BackfillPolicy(max_age_days)
    raise ValueError(f"Unknown mode: {mode}. Available: ['today', 'all']")
