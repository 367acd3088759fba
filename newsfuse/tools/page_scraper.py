"""Single-page scraping: main text, article images, embedded videos, links."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

from newsfuse.config import settings
from newsfuse.tools import http_fetch, web_utils

REMOVE_SELECTORS = (
    "script",
    "style",
    "noscript",
    "header",
    "footer",
    "nav",
    "iframe",
    "form",
    "button",
    "svg",
    "canvas",
    ".ads",
    ".ad",
    ".advertisement",
    ".sponsored",
    ".promo",
    ".share",
    ".social",
    ".cookie",
    ".newsletter",
    ".popup",
    ".modal",
    ".breadcrumb",
    ".banner",
    ".related",
    "aside",
    ".sidebar",
    "section.widget",
    "link[rel=stylesheet]",
)

MAIN_SELECTORS = (
    "article",
    ".article",
    ".post",
    ".main-content",
    ".content",
    ".story",
    "#content",
)

MIN_MAIN_CONTENT_CHARS = 150

IMAGE_SELECTORS = (
    "article img",
    ".article img",
    ".post img",
    ".story img",
    ".content img",
    ".main-content img",
    "img[loading='lazy']",
)

VALID_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

BAD_IMAGE_PATTERNS = (
    "logo",
    "icon",
    "sprite",
    "default",
    "placeholder",
    "ads",
    "advert",
    "banner",
    "pixel",
    "tracking",
    "share",
    "social",
    "thumb",
    "small",
    "mini",
    "favicon",
    "og-image",
)

VIDEO_SELECTORS = (
    "article iframe",
    ".post iframe",
    ".story iframe",
    ".content iframe",
    "article video",
    ".content video",
)

SOCIAL_LINK_DOMAINS = ("facebook.com", "twitter.com", "x.com", "instagram.com", "whatsapp.com")


@dataclass
class PageScrape:
    url: str
    title: str
    content: str
    images: list[str] = field(default_factory=list)
    videos: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "images": self.images,
            "videos": self.videos,
            "links": self.links,
            "length": {
                "text": len(self.content),
                "images": len(self.images),
                "videos": len(self.videos),
                "links": len(self.links),
            },
        }


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _is_social_link(url: str) -> bool:
    domain = web_utils.extract_domain(url)
    if any(domain == d or domain.endswith("." + d) for d in SOCIAL_LINK_DOMAINS):
        return True
    return "share=" in url.lower()


def is_good_image(src: str | None) -> bool:
    if not src:
        return False
    lower = src.lower()
    if len(lower) < 15:
        return False
    if not any(ext in lower for ext in VALID_IMAGE_EXTENSIONS):
        return False
    return not any(bad in lower for bad in BAD_IMAGE_PATTERNS)


def clean_text(text: str) -> str:
    """Collapse whitespace, drop script residue and duplicate sentences."""
    text = web_utils.collapse_whitespace(text)
    text = re.sub(r"<!--.*?-->", "", text, flags=re.DOTALL)
    text = re.sub(r"ADVERTISEMENT", "", text, flags=re.IGNORECASE)
    sentences = [s.strip() for s in re.split(r"[.!?]+", text)]
    unique = _unique([s for s in sentences if s])
    return ". ".join(unique).strip()


def strip_junk(soup: BeautifulSoup) -> None:
    for selector in REMOVE_SELECTORS:
        for node in soup.select(selector):
            node.decompose()


def main_text(soup: BeautifulSoup) -> str:
    """Text of the first main-content container long enough to be an article."""
    for selector in MAIN_SELECTORS:
        nodes = soup.select(selector)
        if not nodes:
            continue
        text = " ".join(node.get_text(" ") for node in nodes)
        if len(text.strip()) > MIN_MAIN_CONTENT_CHARS:
            return text
    body = soup.body or soup
    return body.get_text(" ")


def _media_sources(soup: BeautifulSoup, selectors: tuple[str, ...]) -> list[str]:
    found = []
    for selector in selectors:
        for node in soup.select(selector):
            found.append(node.get("src") or node.get("data-src") or "")
    return found


def parse_page(html: str, url: str) -> PageScrape:
    soup = BeautifulSoup(html, "html.parser")
    title = web_utils.collapse_whitespace(soup.title.get_text()) if soup.title else ""

    raw_links = [a.get("href") for a in soup.find_all("a", href=True)]
    links = []
    for href in raw_links:
        absolute = web_utils.resolve_url(href, url)
        if absolute and not _is_social_link(absolute):
            links.append(absolute)

    # Embedded players are iframes, which the junk pass removes.
    videos = []
    for src in _media_sources(soup, VIDEO_SELECTORS):
        if src.startswith("http"):
            absolute = web_utils.resolve_url(src, url)
            if absolute:
                videos.append(absolute)

    strip_junk(soup)

    images = []
    for src in _media_sources(soup, IMAGE_SELECTORS):
        if is_good_image(src):
            absolute = web_utils.resolve_url(src, url)
            if absolute:
                images.append(absolute)

    return PageScrape(
        url=url,
        title=title,
        content=clean_text(main_text(soup)),
        images=_unique(images),
        videos=_unique(videos),
        links=_unique(links),
    )


async def scrape_page(url: str, *, timeout_s: float | None = None) -> PageScrape:
    """Fetch and parse one page; raises on transport errors."""
    fetched = await http_fetch.get(
        url,
        timeout_s=timeout_s if timeout_s is not None else settings.deep_fetch_timeout_s,
    )
    return parse_page(fetched.text, url)
