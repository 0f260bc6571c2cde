"""Reference URL retrieval and readable-text extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import TYPE_CHECKING

import httpx
import structlog

from src.podcast_studio.services.errors import ContentFetchError

if TYPE_CHECKING:
    from src.podcast_studio.config import Settings

logger = structlog.get_logger()

USER_AGENT = "Mozilla/5.0 (compatible; PodcastGenerator/1.0; +https://example.com)"

_SKIP_TAGS = frozenset(
    {"head", "title", "script", "style", "nav", "header", "footer", "aside", "iframe", "noscript"}
)
_SKIP_CLASSES = frozenset({"ad", "ads", "advertisement"})
_SKIP_IDS = frozenset({"cookie-banner"})
_VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source",
     "track", "wbr"}
)

# Checked in order; the first container with any text wins
_CONTAINERS = ("article", "main", "role_main", "content", "post_content", "body")


class _ReadableTextParser(HTMLParser):
    """Collects text per candidate content container, ignoring page chrome."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._stack: list[tuple[str, bool, str | None]] = []
        self.text: dict[str, list[str]] = {name: [] for name in _CONTAINERS}

    @staticmethod
    def _container(tag: str, attrs: dict[str, str | None]) -> str | None:
        classes = set((attrs.get("class") or "").split())
        if tag in ("article", "main", "body"):
            return tag
        if attrs.get("role") == "main":
            return "role_main"
        if "post-content" in classes:
            return "post_content"
        if "content" in classes:
            return "content"
        return None

    def handle_starttag(self, tag, attrs):
        if tag in _VOID_TAGS:
            return
        if tag == "body":
            # An unclosed <head> must not hide the whole document
            self._stack = [entry for entry in self._stack if entry[0] != "head"]
        attr_map = dict(attrs)
        classes = set((attr_map.get("class") or "").split())
        skip = tag in _SKIP_TAGS or bool(classes & _SKIP_CLASSES) or attr_map.get("id") in _SKIP_IDS
        self._stack.append((tag, skip, self._container(tag, attr_map)))

    def handle_endtag(self, tag):
        for i in range(len(self._stack) - 1, -1, -1):
            if self._stack[i][0] == tag:
                del self._stack[i:]
                return

    def handle_data(self, data):
        if any(skip for _, skip, _ in self._stack):
            return
        open_containers = {container for _, _, container in self._stack if container}
        # Text outside an explicit <body> still counts as body text
        open_containers.add("body")
        for name in open_containers:
            self.text[name].append(data)


def extract_readable_text(html: str) -> str:
    """Return whitespace-collapsed main text of an HTML document."""
    parser = _ReadableTextParser()
    parser.feed(html)
    parser.close()
    for name in _CONTAINERS:
        text = " ".join("".join(parser.text[name]).split())
        if text:
            return text
    return ""


def truncate_words(text: str, max_words: int) -> str:
    words = text.split(" ")
    if len(words) > max_words:
        return " ".join(words[:max_words]) + "..."
    return text


@dataclass
class FetchResult:
    """Outcome of fetching a batch of reference URLs."""

    summaries: str = ""
    failed_urls: list[str] = field(default_factory=list)


class ContentFetcher:
    """Fetches reference pages and reduces them to plain text."""

    def __init__(self, settings: Settings) -> None:
        self.timeout = httpx.Timeout(timeout=settings.fetch_timeout)
        self.max_words = settings.fetch_max_words

    async def fetch_url_content(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                html = resp.text
        except httpx.HTTPError as e:
            logger.error("Failed to fetch URL", url=url, error=str(e))
            raise ContentFetchError(f"Failed to fetch {url}: {e}") from e

        return truncate_words(extract_readable_text(html), self.max_words)

    async def fetch_all(self, urls: list[str]) -> FetchResult:
        """Fetch ``urls`` one by one; failures are collected, not raised."""
        result = FetchResult()
        summaries = []
        for url in urls:
            try:
                content = await self.fetch_url_content(url)
            except ContentFetchError:
                result.failed_urls.append(url)
                continue
            if content:
                summaries.append(f"Content from {url}:\n{content}")

        result.summaries = "\n\n---\n\n".join(summaries)
        logger.info("Reference URLs fetched", fetched=len(summaries), failed=len(result.failed_urls))
        return result
