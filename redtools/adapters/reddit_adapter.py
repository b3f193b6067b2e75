"""Abstract base class for Reddit data access."""

from abc import ABC, abstractmethod

from redtools.core.types import AuthToken, CommentNode, PostSort, PostSummary


class RedditAdapter(ABC):
    """Abstract interface for fetching Reddit data."""

    @abstractmethod
    def authenticate(self) -> AuthToken:
        """Obtain an access token with the password grant.

        Raises:
            ConfigError: Credentials missing
            AuthenticationError: Credentials rejected
            NetworkError: Reddit not reachable
            DecodeError: Token response malformed
        """
        ...

    @abstractmethod
    def get_subreddit_posts(
        self,
        subreddit: str,
        sort: PostSort,
        limit: int,
        token: AuthToken,
    ) -> list[PostSummary]:
        """Fetch one listing page of up to limit (1-100) posts, pinned removed.

        Raises:
            ConfigError: limit out of range
            NetworkError, ApiError, DecodeError
        """
        ...

    @abstractmethod
    def fetch_up_to(
        self,
        subreddit: str,
        sort: PostSort,
        limit: int,
        token: AuthToken,
    ) -> list[PostSummary]:
        """Follow the listing cursor until limit non-pinned posts are collected.

        Raises:
            NetworkError, ApiError, DecodeError
        """
        ...

    @abstractmethod
    def get_post_comments(self, permalink: str) -> list[CommentNode]:
        """Fetch and parse the comment tree of one post.

        Args:
            permalink: Post permalink (e.g., "/r/python/comments/abc/title/")

        Raises:
            NetworkError, ApiError, DecodeError
        """
        ...
