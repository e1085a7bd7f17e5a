"""site_rank.crawler: link discovery turning a seed page into a GraphStore."""

from site_rank.crawler.crawler import CrawlEngine, CrawlFailure
from site_rank.crawler.fetcher import HttpFetcher
from site_rank.crawler.link_extractor import canonicalize_link, extract_hrefs
from site_rank.crawler.models import FetchError, FetchResult, Job, PageFetcher, Visit

__all__ = [
    "CrawlEngine",
    "CrawlFailure",
    "HttpFetcher",
    "canonicalize_link",
    "extract_hrefs",
    "FetchError",
    "FetchResult",
    "Job",
    "PageFetcher",
    "Visit",
]
