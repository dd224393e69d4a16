"""Text cleanup utilities for untrusted strings scraped from cinema websites."""

import html
import re
import unicodedata
from urllib.parse import urljoin, urlsplit


def clean_text(text: str | None) -> str:
    """
    Collapse whitespace and decode leftover HTML entities.

    BeautifulSoup decodes entities in text nodes, but attribute values are
    sometimes double-encoded by the source CMS ("&amp;amp;"), so unescaping
    is applied until the string stops changing.

    Args:
        text: Raw text, possibly None

    Returns:
        Cleaned text ("" for None)
    """
    if not text:
        return ""

    previous = None
    while previous != text:
        previous = text
        text = html.unescape(text)

    # Non-breaking and zero-width spaces show up in hand-edited listings
    text = text.replace("\xa0", " ").replace("\u200b", "")
    return re.sub(r"\s+", " ", text).strip()


def normalise_title(title: str | None) -> str:
    """
    Normalize a film title for display and matching.

    Removes markup artifacts without changing the title itself:
    - Entities and whitespace runs: "BITTER&nbsp; RICE" → "BITTER RICE"
    - Wrapping quotes: '"Taxi Driver"' → "Taxi Driver"
    - Trailing separators left by stripped markup: "Taxi Driver |" → "Taxi Driver"

    Args:
        title: Raw film title

    Returns:
        Normalized title ("" if nothing usable remains)
    """
    title = clean_text(title)

    # Remove wrapping quotes, but keep quotes inside the title
    m = re.fullmatch(r"[\"“”'‘’](.+)[\"“”'‘’]", title)
    if m:
        title = m.group(1).strip()

    title = re.sub(r"\s*[|•·]\s*$", "", title)

    return title.strip()


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    Accented characters are folded to ASCII first so "Amélie" becomes
    "amelie" rather than "amlie".

    Args:
        text: Text to slugify

    Returns:
        Lowercase slug with hyphens
    """
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))

    # Convert to lowercase
    text = text.lower()

    # Replace whitespace and underscores with hyphens
    text = re.sub(r"[\s_]+", "-", text)

    # Remove non-alphanumeric characters (except hyphens)
    text = re.sub(r"[^a-z0-9-]", "", text)

    # Remove multiple consecutive hyphens
    text = re.sub(r"-+", "-", text)

    # Strip leading/trailing hyphens
    text = text.strip("-")

    return text


def absolute_url(href: str | None, base_url: str) -> str | None:
    """
    Resolve a scraped href against the page it came from.

    Returns None for empty, fragment-only and non-http links
    (javascript:, mailto:, tel:) so callers can fall back to another URL.
    """
    href = (href or "").strip()
    if not href or href.startswith("#"):
        return None

    url = urljoin(base_url, href)
    if urlsplit(url).scheme not in ("http", "https"):
        return None
    return url


def truncate(text: str, limit: int) -> str:
    """Cut text to at most `limit` characters on a word boundary."""
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0].rstrip(" ,;:-")
    return f"{cut}..."
