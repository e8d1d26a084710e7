import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from jobsync.parsers import PARSER_REGISTRY

load_dotenv()


# Crawler settings
REQUEST_TIMEOUT = 30.0  # seconds, per attempt
MAX_RETRIES = 3
RETRY_DELAY = 0.8  # seconds, multiplied by attempt number

# User-Agent for requests
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

# Listing settings
BASE_URL = "https://topstartups.io/jobs/"
PARSER_TYPE = "topstartups"
DEFAULT_MODE = "today"
CRAWL_MODES = ("today", "all")

# Output files, relative to the output directory
INDEX_FILE = "index.json"
EVENTS_FILE = "jobs.jsonl"
SNAPSHOT_JSON_FILE = "jobs.json"
SNAPSHOT_CSV_FILE = "jobs.csv"


@dataclass
class CrawlConfig:
    """
    Settings for a single crawl run.

    Durations are in seconds. Construction validates every field, so an
    invalid mode is rejected before any request is sent.
    """
    mode: str = DEFAULT_MODE
    base_url: str = BASE_URL
    start_page: int = 1
    delay: float = 0.5
    max_age_days: int = 180
    out_dir: Path = field(default_factory=lambda: Path("out"))
    commit_every_pages: int = 1
    max_pages: int = 0  # 0 means no page cap
    timeout: float = REQUEST_TIMEOUT
    retries: int = MAX_RETRIES
    retry_backoff: float = RETRY_DELAY
    user_agent: str = USER_AGENT
    parser_type: str = PARSER_TYPE

    def __post_init__(self) -> None:
        if self.mode not in CRAWL_MODES:
            raise ValueError(
                f"Invalid mode={self.mode!r}. Expected one of: {', '.join(CRAWL_MODES)}"
            )
        if self.start_page < 1:
            raise ValueError(f"start_page must be >= 1, got {self.start_page}")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")
        if self.max_age_days < 0:
            raise ValueError(f"max_age_days must be >= 0, got {self.max_age_days}")
        if self.max_pages < 0:
            raise ValueError(f"max_pages must be >= 0, got {self.max_pages}")
        if self.parser_type not in PARSER_REGISTRY:
            raise ValueError(
                f"Unknown parser_type={self.parser_type!r}. Available: {list(PARSER_REGISTRY)}"
            )
        self.out_dir = Path(self.out_dir)
        self.commit_every_pages = max(1, int(self.commit_every_pages))
        self.retries = max(1, int(self.retries))

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """Build a config from CRAWL_* environment variables (and .env)."""
        return cls(**env_settings())

    @property
    def index_path(self) -> Path:
        return self.out_dir / INDEX_FILE

    @property
    def events_path(self) -> Path:
        return self.out_dir / EVENTS_FILE


# Config field -> (environment variable, reader, default)
ENV_SETTINGS = {
    "mode": ("CRAWL_MODE", str, DEFAULT_MODE),
    "base_url": ("CRAWL_BASE_URL", str, BASE_URL),
    "start_page": ("CRAWL_START_PAGE", int, 1),
    "delay": ("CRAWL_DELAY", float, 0.5),
    "max_age_days": ("CRAWL_MAX_AGE_DAYS", int, 180),
    "out_dir": ("CRAWL_OUT_DIR", Path, Path("out")),
    "commit_every_pages": ("CRAWL_COMMIT_EVERY_PAGES", int, 1),
    "max_pages": ("CRAWL_MAX_PAGES", int, 0),
    "parser_type": ("CRAWL_PARSER_TYPE", str, PARSER_TYPE),
    "timeout": ("REQUEST_TIMEOUT", float, REQUEST_TIMEOUT),
    "retries": ("MAX_RETRIES", int, MAX_RETRIES),
    "retry_backoff": ("RETRY_DELAY", float, RETRY_DELAY),
    "user_agent": ("USER_AGENT", str, USER_AGENT),
}


def env_settings(exclude: set[str] | frozenset[str] = frozenset()) -> dict[str, Any]:
    """
    Read CrawlConfig keyword arguments from the environment.

    Fields named in exclude are not read, so a value that will be
    overridden anyway is never parsed. Unset or blank variables fall back
    to the defaults.

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    settings: dict[str, Any] = {}
    for name, (env_name, reader, default) in ENV_SETTINGS.items():
        if name in exclude:
            continue
        value = os.environ.get(env_name)
        if value is None or not value.strip():
            settings[name] = default
            continue
        try:
            settings[name] = reader(value.strip())
        except ValueError:
            raise ValueError(f"{env_name} must be {reader.__name__}, got {value!r}") from None
    return settings


def page_url(base_url: str, page: int) -> str:
    """Listing URL for a 1-based page number."""
    return f"{base_url}?page={page}&"
