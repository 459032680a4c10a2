"""Slug generation for document paths, taxonomy terms and heading anchors"""

import re


def slugify(text: str, keep: str = "") -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug; characters in keep survive."""
    text = text.lower()
    text = re.sub(rf'[^\w\s{re.escape(keep)}-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def unique_slug(text: str, seen: dict[str, int]) -> str:
    """Slugify text, suffixing -1, -2, ... for repeats tracked in seen."""
    base = slugify(text) or 'section'
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}-{count}"
