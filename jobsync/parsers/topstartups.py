import re

from bs4 import BeautifulSoup, Tag

from jobsync.parsers.base import (
    BaseParser,
    JobRecord,
    dedupe_records,
    normalize_space,
    parse_posted_age_days,
    stable_id,
)

_NEW_BADGE_RE = re.compile(r"\bNew\b$", re.IGNORECASE)
_NEW_TAG_RE = re.compile(r"tags\.new$", re.IGNORECASE)
_WHAT_THEY_DO_RE = re.compile(r"what they do:\s*", re.IGNORECASE)

DEFAULT_SELECTORS = {
    "card_selector": ".infinite-container .infinite-item > .card.card-body#item-card-filter",
    "link_selector": "a#startup-website-link[href]",
    "title_selector": "#job-title",
    "company_marker": "h7",
    "apply_selector": "a#apply-button[href]",
    "location_icon": ".fa-map-marker-alt",
    "experience_icon": ".fa-briefcase",
    "posted_icon": ".fa-clock",
    "company_size_selector": "#company-size-tags",
    "funding_selector": "#funding-tags",
    "industry_selector": "#industry-tags",
    "header_selector": "b#card-header",
}


def _strip_new_badge(text: str) -> str:
    """Remove the trailing "New" badge the site appends to fresh titles."""
    text = _NEW_BADGE_RE.sub("", normalize_space(text))
    return normalize_space(_NEW_TAG_RE.sub("", text))


def _text(el: Tag | None) -> str:
    return el.get_text() if el is not None else ""


def _attr(el: Tag | None, name: str) -> str:
    if el is None:
        return ""
    value = el.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return normalize_space(value)


class TopStartupsParser(BaseParser):
    """
    Parser for the topstartups.io job board.

    Each listing card holds two anchors with the same id: one wraps the
    job title and points at the job detail page, the other wraps the
    company name (an h7) and points at the company site. Cards without a
    job link have no identity and are dropped.

    Any selector in DEFAULT_SELECTORS can be overridden through the
    parser config.
    """

    def _selector(self, key: str) -> str:
        return self.config.get(key, DEFAULT_SELECTORS[key])

    def parse_list(self, html: str, source_url: str) -> list[JobRecord]:
        """Parse listing cards into records, in page order."""
        soup = BeautifulSoup(html or "", "lxml")
        records: list[JobRecord] = []

        for card in soup.select(self._selector("card_selector")):
            record = self._parse_card(card, source_url)
            if record is not None:
                records.append(record)

        return dedupe_records(records)

    def _parse_card(self, card: Tag, source_url: str) -> JobRecord | None:
        title_selector = self._selector("title_selector")
        links = card.select(self._selector("link_selector"))

        job_link = next((a for a in links if a.select_one(title_selector)), None)
        job_url = _attr(job_link, "href")
        if not job_url:
            return None

        company_marker = self._selector("company_marker")
        company_link = next(
            (
                a for a in links
                if a.select_one(company_marker) and not a.select_one(title_selector)
            ),
            None,
        )

        posted = self._icon_text(card, "posted_icon")

        return JobRecord(
            id=stable_id(job_url),
            job_url=job_url,
            company=_strip_new_badge(_text(company_link)),
            company_site=_attr(company_link, "href"),
            job_title=_strip_new_badge(_text(card.select_one(title_selector))),
            apply_url=_attr(card.select_one(self._selector("apply_selector")), "href") or job_url,
            location=self._icon_text(card, "location_icon"),
            experience=self._icon_text(card, "experience_icon"),
            posted=posted,
            posted_age_days=parse_posted_age_days(posted),
            logo=_attr(card.find("img"), "src"),
            company_size=normalize_space(
                _text(card.select_one(self._selector("company_size_selector")))
            ),
            funding_tags=self._tag_texts(card, "funding_selector"),
            industries=self._tag_texts(card, "industry_selector"),
            what_they_do=self._what_they_do(card),
            source=source_url,
        )

    def _icon_text(self, card: Tag, key: str) -> str:
        # Values sit next to a Font Awesome icon; read the icon's container.
        icon = card.select_one(self._selector(key))
        if icon is None or icon.parent is None:
            return ""
        return normalize_space(icon.parent.get_text())

    def _tag_texts(self, card: Tag, key: str) -> list[str]:
        texts = (normalize_space(tag.get_text()) for tag in card.select(self._selector(key)))
        return [text for text in texts if text]

    def _what_they_do(self, card: Tag) -> str:
        for header in card.select(self._selector("header_selector")):
            if not normalize_space(header.get_text()).lower().startswith("what they do"):
                continue
            if header.parent is None:
                return ""
            return normalize_space(_WHAT_THEY_DO_RE.sub("", header.parent.get_text(), count=1))
        return ""
