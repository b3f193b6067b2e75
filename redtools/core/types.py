"""Data Transfer Objects for redtools."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

REDDIT_WEB_URL = "https://www.reddit.com"


class GeminiModel(str, Enum):
    """Gemini models the app knows how to call."""

    FLASH_8B = "gemini-1.5-flash-8b-latest"
    FLASH = "gemini-1.5-flash-latest"
    PRO = "gemini-2.0-flash-exp"

    @property
    def display_name(self) -> str:
        return {
            GeminiModel.FLASH_8B: "Gemini 1.5 Flash 8B",
            GeminiModel.FLASH: "Gemini 1.5 Flash",
            GeminiModel.PRO: "Gemini 2.0 Flash",
        }[self]


class PostSort(str, Enum):
    """Subreddit listing sort."""

    NEW = "new"
    HOT = "hot"
    TOP = "top"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class CommentNode:
    """One Reddit comment with its reply tree.

    Built once per fetch and never mutated afterwards.
    """

    id: str
    raw_text: str                    # body exactly as served
    processed_text: str = ""         # body with image URLs stripped
    image_urls: tuple[str, ...] = ()
    links: tuple[tuple[str, str], ...] = ()   # (display text, url)
    children: tuple['CommentNode', ...] = ()

    @property
    def limited_image_urls(self) -> tuple[str, ...]:
        return self.image_urls[:2]

    @property
    def has_more_images(self) -> bool:
        return len(self.image_urls) > 2


@dataclass
class PostSummary:
    """Reddit listing entry."""

    id: str
    title: str
    body_text: str = ""
    upvote_count: int = 0
    comment_count: int = 0
    permalink: str = ""
    thumbnail_url: Optional[str] = None
    image_url: Optional[str] = None      # best single image
    image_urls: list[str] = field(default_factory=list)
    is_pinned: bool = False

    @property
    def preview_text(self) -> str:
        return self.body_text[:300]

    @property
    def full_url(self) -> str:
        return f"{REDDIT_WEB_URL}{self.permalink}"


@dataclass
class AuthToken:
    """Reddit OAuth access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = 0
    scope: str = ""


@dataclass
class QAEntry:
    question: str
    answer: str


@dataclass
class ChatMessage:
    role: str  # "user" | "assistant"
    text: str


@dataclass
class SharedContent:
    """Most recent text handed over by another process."""

    text: str
    updated_at: float = 0.0


@dataclass
class ActionResult:
    """Outcome of a user-triggered action: a value or a display error."""

    action: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
