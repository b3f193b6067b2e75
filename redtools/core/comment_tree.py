"""Build and flatten Reddit comment trees.

Works on already-decoded JSON. Reddit wraps every node in
``{"kind": ..., "data": {...}}``; only ``t1`` (comment) wrappers become
nodes, everything else ("more" placeholders, malformed entries) is skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Union

from redtools.core.text_extractor import extract_images, extract_links, strip_images
from redtools.core.types import CommentNode

logger = logging.getLogger("redtools")

COMMENT_KIND = "t1"
INDENT = "    "
LINE_SEPARATOR = "\n\n"

_END = object()


@dataclass(frozen=True)
class Parsed:
    node: CommentNode


@dataclass(frozen=True)
class Skipped:
    reason: str


ParseOutcome = Union[Parsed, Skipped]


def _reply_children(data: dict) -> list:
    """Return data.replies.data.children, or [] when absent.

    Reddit sends ``replies: ""`` for leaf comments.
    """
    replies = data.get("replies")
    if not isinstance(replies, dict):
        return []
    replies_data = replies.get("data")
    if not isinstance(replies_data, dict):
        return []
    children = replies_data.get("children")
    return children if isinstance(children, list) else []


def _comment_data(wrapper: Any) -> Union[dict, Skipped]:
    """Validate one wrapper and return its data object, or why it was skipped."""
    if not isinstance(wrapper, dict):
        return Skipped("not an object")

    kind = wrapper.get("kind")
    if kind != COMMENT_KIND:
        return Skipped(f"kind {kind!r}")

    data = wrapper.get("data")
    if not isinstance(data, dict):
        return Skipped("missing data")

    if not isinstance(data.get("id"), str):
        return Skipped("missing id")
    if not isinstance(data.get("body"), str):
        return Skipped("missing body")
    return data


def _build_node(data: dict, children: list[CommentNode]) -> CommentNode:
    body = data["body"]
    images = extract_images(body)
    return CommentNode(
        id=data["id"],
        raw_text=body,
        processed_text=strip_images(body, images),
        image_urls=tuple(images),
        links=tuple(extract_links(body)),
        children=tuple(children),
    )


def parse_comment(wrapper: Any) -> ParseOutcome:
    """Parse one comment wrapper and its replies."""
    data = _comment_data(wrapper)
    if isinstance(data, Skipped):
        return data
    return Parsed(_build_node(data, parse_comments(_reply_children(data))))


def parse_comments(wrappers: Any) -> list[CommentNode]:
    """Parse a listing's children array, keeping source order.

    Walks the reply tree with an explicit stack, so nesting depth is bounded
    only by memory.
    """
    if not isinstance(wrappers, list):
        return []

    top_level: list[CommentNode] = []
    # (remaining siblings, nodes parsed so far at this level, parent data)
    stack = [(iter(wrappers), top_level, None)]
    while stack:
        siblings, parsed, parent = stack[-1]
        wrapper = next(siblings, _END)
        if wrapper is _END:
            stack.pop()
            if parent is not None:
                stack[-1][1].append(_build_node(parent, parsed))
            continue

        data = _comment_data(wrapper)
        if isinstance(data, Skipped):
            logger.debug(f"Skipped comment wrapper: {data.reason}")
            continue
        stack.append((iter(_reply_children(data)), [], data))

    return top_level


def parse_comment_listing(payload: Any) -> list[CommentNode]:
    """Parse the two-element response of the comments endpoint.

    Element 0 is the post listing, element 1 the comment listing. Any other
    shape yields no comments.
    """
    if not isinstance(payload, list) or len(payload) < 2:
        return []
    listing = payload[1]
    if not isinstance(listing, dict):
        return []
    data = listing.get("data")
    if not isinstance(data, dict):
        return []
    return parse_comments(data.get("children"))


def _walk(nodes, depth: int = 0) -> Iterator[tuple[CommentNode, int]]:
    """Depth-first (node, depth) pairs in display order."""
    stack = [(node, depth) for node in reversed(list(nodes))]
    while stack:
        node, level = stack.pop()
        yield node, level
        stack.extend((child, level + 1) for child in reversed(node.children))


def count_comments(nodes: list[CommentNode]) -> int:
    return sum(1 for _ in _walk(nodes))


def flatten_comments(nodes, depth: int = 0) -> list[str]:
    """Depth-first lines of ``<4 spaces x depth>- <raw text>``.

    Raw text is used on purpose so image URLs stay visible in exports and
    prompts.
    """
    return [f"{INDENT * level}- {node.raw_text}" for node, level in _walk(nodes, depth)]


def join_flattened(lines: list[str]) -> str:
    return LINE_SEPARATOR.join(lines)


def render_comments(nodes, depth: int = 0) -> str:
    """Flatten and join in one step."""
    return join_flattened(flatten_comments(nodes, depth))
