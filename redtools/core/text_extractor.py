"""Image URL and Markdown link extraction for Reddit comment bodies.

All functions are pure and never raise on malformed Markdown: a body with
nothing to find yields empty lists and is returned trimmed but otherwise
unchanged.
"""

import re
from urllib.parse import urlsplit

IMAGE_EXTENSIONS = ("jpg", "jpeg", "gif", "png", "webp", "bmp", "tiff")

# Optional "![alt](" prefix, the URL itself (group 1), optional query, optional ")".
IMAGE_URL_PATTERN = re.compile(
    r'(?:!\[[^\]]*\]\()?'
    r'(https?://[^\s)]+?\.(?:' + "|".join(IMAGE_EXTENSIONS) + r')(?:\?[^\s)]+)?)'
    r'\)?',
    re.IGNORECASE,
)

LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')

# "] (" left behind once an image between a link's text and target is removed
MALFORMED_LINK_PATTERN = re.compile(r'\]\s*\(')


def decode_entities(url: str) -> str:
    return url.replace("&amp;", "&")


def extract_images(body: str) -> list[str]:
    """Return image URLs in order of appearance, with &amp; decoded."""
    return [decode_entities(m.group(1)) for m in IMAGE_URL_PATTERN.finditer(body)]


def _path_extension(url: str) -> str:
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    last = path.rsplit("/", 1)[-1]
    if "." not in last:
        return ""
    return last.rsplit(".", 1)[-1].lower()


def extract_links(body: str) -> list[tuple[str, str]]:
    """Return (text, url) pairs for Markdown links that are not images."""
    links = []
    for match in LINK_PATTERN.finditer(body):
        text, url = match.group(1), match.group(2)
        if _path_extension(url) in IMAGE_EXTENSIONS:
            continue
        links.append((text, url))
    return links


def strip_images(body: str, urls: list[str]) -> str:
    """Remove the given image URLs from body and repair broken link syntax.

    Each URL is removed as a Markdown image first, then as a bare string in
    both its raw and &amp;-encoded forms.
    """
    text = body
    for url in urls:
        encoded = url.replace("&", "&amp;")
        text = re.sub(r'!\[[^\]]*\]\(' + re.escape(url) + r'\)', "", text)
        text = text.replace(url, "")
        text = text.replace(encoded, "")
    text = MALFORMED_LINK_PATTERN.sub("](", text)
    return text.strip()
