from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from ..models import CandidateArticle, HtmlSelectors, SourceConfig, SourceType
from ..utils.logging import get_logger
from ..utils.url_validate import UrlValidation, validate_fetch_url
from .base import DEFAULT_HEADERS, AdapterResult, SourceAdapter

logger = get_logger("scout.fetchers.html")

Validator = Callable[[str], UrlValidation]

_MAX_REDIRECTS = 3


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        dt = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def extract_articles(
    html: str,
    *,
    page_url: str,
    selectors: HtmlSelectors,
    source_name: str,
    max_items: int = 20,
) -> List[CandidateArticle]:
    """Select list items, then title/link/optional date inside each one.

    Items without a title or an href are skipped and do not count towards
    ``max_items``.
    """
    soup = BeautifulSoup(html, "html.parser")
    articles: List[CandidateArticle] = []
    for item in soup.select(selectors.list):
        if len(articles) >= max_items:
            break
        title_el = item.select_one(selectors.title)
        link_el = item.select_one(selectors.link)
        title = title_el.get_text(" ", strip=True) if title_el else ""
        href = (link_el.get("href") or "").strip() if link_el else ""
        if not title or not href:
            continue
        absolute = urljoin(page_url, href)
        if not absolute.startswith(("http://", "https://")):
            continue

        published = None
        if selectors.date:
            date_el = item.select_one(selectors.date)
            if date_el is not None:
                published = _parse_date(date_el.get("datetime") or date_el.get_text(strip=True))

        articles.append(
            CandidateArticle(
                title=title,
                url=absolute,
                published_at=published,
                source_name=source_name,
                source_type="html",
            )
        )
    return articles


class HTMLAdapter(SourceAdapter):
    """Scrapes a news list page with configured CSS selectors."""

    source_type: SourceType = "html"

    def __init__(
        self,
        *,
        timeout: float = 5,
        max_items: int = 20,
        require_https: bool = True,
        validator: Optional[Validator] = None,
    ) -> None:
        self.timeout = timeout
        self.max_items = max_items
        self.validator: Validator = validator or (
            lambda url: validate_fetch_url(url, require_https=require_https)
        )

    def _get(self, url: str) -> Tuple[requests.Response, str]:
        """GET following redirects manually so every hop passes the SSRF check.

        Returns the final response together with the URL it was served from.
        """
        current = url
        for _ in range(_MAX_REDIRECTS + 1):
            resp = requests.get(
                current, headers=DEFAULT_HEADERS, timeout=self.timeout, allow_redirects=False
            )
            if not resp.is_redirect:
                return resp, current
            target = urljoin(current, resp.headers.get("Location", ""))
            check = self.validator(target)
            if not check.valid:
                raise requests.exceptions.InvalidURL(f"redirect blocked: {check.reason}")
            current = check.url or target
        raise requests.exceptions.TooManyRedirects(f"more than {_MAX_REDIRECTS} redirects")

    def fetch(self, source: SourceConfig, topic_description: str) -> AdapterResult:
        self._check_type(source)
        result = AdapterResult()
        if not source.selectors:
            result.errors.append(f"HTML source {source.name}: no selectors configured")
            return result
        if not source.url:
            result.errors.append(f"HTML source {source.name}: no base URL configured")
            return result

        check = self.validator(source.url)
        if not check.valid:
            logger.warning("SSRF check blocked %s: %s", source.url, check.reason)
            result.errors.append(f"SSRF blocked: {check.reason}")
            return result
        page_url = check.url or source.url

        logger.debug("Fetching HTML list page %s", page_url)
        try:
            resp, page_url = self._get(page_url)
        except requests.RequestException as exc:
            result.errors.append(f"Fetch failed for {source.url}: {exc}")
            return result
        if resp.status_code >= 400:
            logger.warning("HTML fetch failed (%s): %s", resp.status_code, source.url)
            result.errors.append(f"HTTP {resp.status_code} from {source.url}")
            return result

        try:
            result.articles = extract_articles(
                resp.text,
                page_url=page_url,
                selectors=source.selectors,
                source_name=source.name,
                max_items=self.max_items,
            )
        except Exception as exc:  # noqa: BLE001 - bad selectors or markup must stay source-scoped
            result.errors.append(f"Parse failed for {source.url}: {exc}")
        logger.info("Scraped %d items from %s", len(result.articles), source.name)
        return result
