import time
from typing import Callable

import httpx
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from jobsync.config import (
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    RETRY_DELAY,
    USER_AGENT,
    CrawlConfig,
    page_url,
)
from jobsync.events import EventLog
from jobsync.parsers import get_parser
from jobsync.snapshot import write_snapshots
from jobsync.stop_policy import get_stop_policy
from jobsync.store import IndexStore, utc_now


class FetchError(Exception):
    """Raised when a page could not be fetched within the allowed attempts."""

    def __init__(self, url: str, last_error: BaseException | None):
        self.url = url
        self.last_error = last_error
        super().__init__(f"Failed to fetch {url}: {last_error}")


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    print(
        f"[WARN] Attempt {retry_state.attempt_number} failed: {error}. "
        f"Retrying in {wait:.1f}s"
    )


def _get(client: httpx.Client, url: str, timeout: float, user_agent: str) -> str:
    response = client.get(
        url,
        headers={"User-Agent": user_agent, "Accept": "text/html,*/*"},
        timeout=timeout,
    )
    response.raise_for_status()
    return response.text


def fetch_url(
    url: str,
    *,
    timeout: float = REQUEST_TIMEOUT,
    retries: int = MAX_RETRIES,
    retry_backoff: float = RETRY_DELAY,
    user_agent: str = USER_AGENT,
    client: httpx.Client | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Fetch a URL with retry logic.

    Args:
        url: The URL to fetch
        timeout: Seconds allowed for each attempt
        retries: Total number of attempts
        retry_backoff: Wait before attempt n+1 is retry_backoff * n seconds
        user_agent: User-Agent header value
        client: Shared client to use instead of a per-call one

    Returns:
        The response text

    Raises:
        FetchError: If all attempts fail, carrying the last httpx error
    """
    retrying = Retrying(
        stop=stop_after_attempt(max(1, retries)),
        wait=wait_incrementing(start=retry_backoff, increment=retry_backoff),
        retry=retry_if_exception_type(httpx.HTTPError),
        before_sleep=_log_retry,
        sleep=sleep,
    )

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        return retrying(_get, client, url, timeout, user_agent)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        raise FetchError(url, last_error) from last_error
    finally:
        if owns_client:
            client.close()


def crawl(
    config: CrawlConfig,
    client: httpx.Client | None = None,
    sleep: Callable[[float], None] = time.sleep,
    now: Callable[[], str] = utc_now,
) -> dict[str, int]:
    """
    Crawl listing pages until the mode's stop condition holds.

    Each page's records go to the event log and the index; the index is
    committed every config.commit_every_pages pages and once more at the
    end, then jobs.json and jobs.csv are written.

    Args:
        config: Validated crawl settings
        client: Optional httpx client (a per-run client is created otherwise)
        sleep: Used for the inter-page pause and retry backoff
        now: Timestamp source for observations

    Returns:
        Stats dict with counts for PAGES, NEW, UPDATED, EVENTS

    Raises:
        FetchError: If a page cannot be fetched; pages already processed
            are committed to index.json first
    """
    parser = get_parser(config.parser_type)
    policy = get_stop_policy(config.mode, config.max_age_days)

    config.out_dir.mkdir(parents=True, exist_ok=True)
    store = IndexStore.load(config.index_path)
    print(f"[INFO] Loaded index with {len(store)} jobs from {config.index_path}")

    stats = {"PAGES": 0, "NEW": 0, "UPDATED": 0, "EVENTS": 0}
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=config.timeout, follow_redirects=True)

    pending_pages = 0
    try:
        with EventLog(config.events_path) as events:
            page = config.start_page
            while True:
                url = page_url(config.base_url, page)
                print(f"[INFO] Fetching: {url}")

                html = fetch_url(
                    url,
                    timeout=config.timeout,
                    retries=config.retries,
                    retry_backoff=config.retry_backoff,
                    user_agent=config.user_agent,
                    client=client,
                    sleep=sleep,
                )
                records = parser.parse_list(html, config.base_url)
                observed_at = now()
                print(f"[INFO]   page items: {len(records)}")

                for record in records:
                    events.append(record, observed_at)
                    result = store.upsert(record, observed_at)
                    stats["NEW" if result.is_new else "UPDATED"] += 1
                    stats["EVENTS"] += 1

                stats["PAGES"] += 1
                pending_pages += 1
                if pending_pages >= config.commit_every_pages:
                    store.save()
                    pending_pages = 0

                decision = policy.evaluate(records)
                if decision.stop:
                    print(f"[STOP] {decision.reason} (page={page})")
                    break

                if config.max_pages and stats["PAGES"] >= config.max_pages:
                    print(f"[STOP] max_pages (page={page})")
                    break

                page += 1
                sleep(config.delay)
    except FetchError:
        if pending_pages:
            store.save()
        raise
    finally:
        if owns_client:
            client.close()

    store.save()
    json_path, csv_path = write_snapshots(store, config.out_dir)
    print(f"[INFO] Wrote {len(store)} jobs to {json_path} and {csv_path}")

    return stats
