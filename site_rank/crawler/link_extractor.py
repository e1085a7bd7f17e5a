# site_rank/crawler/link_extractor.py
"""
Href extraction and link canonicalization utilities for SiteRank.
"""
from __future__ import annotations

from typing import List, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

_ALLOWED_SCHEMES = ("http", "https")


def _host_key(netloc: str) -> str:
    """Host and port without userinfo, case-folded."""
    return netloc.rpartition("@")[2].lower()


def extract_hrefs(content: Union[str, bytes]) -> List[str]:
    """
    Return the raw ``href`` of every anchor in document order.

    Values are returned untouched; resolving them is :func:`canonicalize_link`'s job.
    """
    soup = BeautifulSoup(content, "html.parser")
    hrefs: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if isinstance(href_val, str):
            hrefs.append(href_val)
    return hrefs


def canonicalize_link(href: str, page_url: str, same_host_only: bool = False) -> Optional[str]:
    """
    Resolve ``href`` found on ``page_url`` into an absolute, fragment-free URL.

    Returns None when the href cannot be parsed, is not http(s), or points to
    another host (host and port, case-insensitive) while ``same_host_only`` is
    set. A path not starting with ``/`` is prefixed with the page path, also
    for hrefs carrying their own host. Query strings and percent
    escapes are kept as they are.
    """
    try:
        page = urlsplit(page_url)
        link = urlsplit(href.strip())
    except ValueError:
        return None

    scheme = link.scheme or page.scheme
    netloc = link.netloc
    path = link.path
    if not netloc:
        netloc = page.netloc
    if not path.startswith("/"):
        path = page.path + path

    if scheme not in _ALLOWED_SCHEMES:
        return None
    if same_host_only and _host_key(netloc) != _host_key(page.netloc):
        return None

    return urlunsplit((scheme, netloc, path, link.query, ""))
