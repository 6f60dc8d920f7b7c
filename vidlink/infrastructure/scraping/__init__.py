from __future__ import annotations

from .cleanup import clean_url
from .extractors import PLATFORM_EXTRACTORS, Extractor, extract_platform_image, run_chain
from .meta import extract_image, scrape_page

__all__ = [
    "PLATFORM_EXTRACTORS",
    "Extractor",
    "clean_url",
    "extract_image",
    "extract_platform_image",
    "run_chain",
    "scrape_page",
]
