"""Pick representative image URLs from a Reddit post record."""

import re
from typing import Any, Iterator, Optional

DIRECT_IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif")
THUMBNAIL_SENTINELS = frozenset({"self", "default", "nsfw", ""})

_BACKSLASH_RUN = re.compile(r'\\+')


def clean_media_url(url: str) -> str:
    """Decode &amp; and drop literal backslash runs."""
    return _BACKSLASH_RUN.sub("", url.replace("&amp;", "&"))


def _preview_url(post: dict) -> Optional[str]:
    preview = post.get("preview")
    if not isinstance(preview, dict):
        return None
    images = preview.get("images")
    if not isinstance(images, list) or not images:
        return None
    first = images[0]
    source = first.get("source") if isinstance(first, dict) else None
    url = source.get("url") if isinstance(source, dict) else None
    if not isinstance(url, str) or not url:
        return None
    return clean_media_url(url)


def _media_url(item: Any) -> Optional[str]:
    """Resolved URL of one media_metadata entry, if valid."""
    if not isinstance(item, dict) or item.get("status") != "valid":
        return None
    source = item.get("s")
    url = source.get("u") if isinstance(source, dict) else None
    if not isinstance(url, str) or not url:
        return None
    return clean_media_url(url)


def _gallery_urls(post: dict) -> Iterator[str]:
    """Valid gallery URLs in gallery order.

    Falls back to media_metadata order when gallery_data is absent.
    """
    media = post.get("media_metadata")
    if not isinstance(media, dict) or not media:
        return

    gallery = post.get("gallery_data")
    items = gallery.get("items") if isinstance(gallery, dict) else None
    if isinstance(items, list):
        media_ids = [i.get("media_id") for i in items if isinstance(i, dict)]
    else:
        media_ids = list(media.keys())

    for media_id in media_ids:
        url = _media_url(media.get(media_id))
        if url:
            yield url


def _direct_url(post: dict) -> Optional[str]:
    url = post.get("url")
    if not isinstance(url, str):
        return None
    lowered = url.lower()
    if not lowered.endswith(DIRECT_IMAGE_SUFFIXES):
        return None
    return clean_media_url(lowered)


def _thumbnail_url(post: dict) -> Optional[str]:
    thumb = post.get("thumbnail")
    if not isinstance(thumb, str) or thumb in THUMBNAIL_SENTINELS:
        return None
    return thumb


def best_image_url(post: dict) -> Optional[str]:
    """First hit of: preview, valid gallery item, direct image URL, thumbnail."""
    url = _preview_url(post)
    if url:
        return url
    url = next(_gallery_urls(post), None)
    if url:
        return url
    url = _direct_url(post)
    if url:
        return url
    return _thumbnail_url(post)


def all_image_urls(post: dict) -> list[str]:
    """Every image for carousel display; thumbnail only when nothing else."""
    urls = []
    preview = _preview_url(post)
    if preview:
        urls.append(preview)
    urls.extend(_gallery_urls(post))
    direct = _direct_url(post)
    if direct:
        urls.append(direct)
    if not urls:
        thumb = _thumbnail_url(post)
        if thumb:
            urls.append(thumb)
    return urls
