"""Reddit adapter: OAuth listings plus public JSON comment trees."""

import json
import logging
from typing import Any, Optional

import requests

from redtools.adapters.reddit_adapter import RedditAdapter
from redtools.core.comment_tree import parse_comment_listing
from redtools.core.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigError,
    DecodeError,
    RedditFetchError,
)
from redtools.core.post_images import all_image_urls, best_image_url
from redtools.core.types import (
    REDDIT_WEB_URL,
    AuthToken,
    CommentNode,
    PostSort,
    PostSummary,
)

logger = logging.getLogger("redtools")

_APP_VERSION = "1.0.0"


class RedditOAuthAdapter(RedditAdapter):
    """Fetches listings from oauth.reddit.com and comments from www.reddit.com.

    Every call is a single blocking request; nothing is retried.
    """

    TOKEN_URL = f"{REDDIT_WEB_URL}/api/v1/access_token"
    OAUTH_URL = "https://oauth.reddit.com"
    REQUEST_TIMEOUT = 30

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        username: str = "",
        password: str = "",
        user_agent: str = f"subreddit_summarizer/{_APP_VERSION}",
        page_size: int = 25,
        max_pages: int = 40,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._username = username
        self._password = password
        self._page_size = page_size
        self._max_pages = max_pages
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": user_agent,
            "Accept": "application/json",
        })

    def authenticate(self) -> AuthToken:
        if not (self._client_id and self._username and self._password):
            raise ConfigError(
                "Reddit credentials are missing (client_id, username, password)."
            )

        try:
            response = self._session.post(
                self.TOKEN_URL,
                auth=(self._client_id, self._client_secret),
                data={
                    "grant_type": "password",
                    "username": self._username,
                    "password": self._password,
                },
                timeout=self.REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise RedditFetchError(f"Authentication error: {e}")

        if not 200 <= response.status_code < 300:
            raise AuthenticationError(response.status_code, self._error_message(response))

        data = self._decode(response, "auth")
        if not isinstance(data, dict):
            raise DecodeError("Failed to decode auth: unexpected response")

        # Reddit answers a bad password with 200 and {"error": "invalid_grant"}
        if "access_token" not in data:
            if "error" in data:
                raise AuthenticationError(response.status_code, f"Authentication failed: {data['error']}")
            raise DecodeError("Failed to decode auth: access_token missing")

        logger.info("Authenticated with Reddit")
        return AuthToken(
            access_token=str(data["access_token"]),
            token_type=str(data.get("token_type", "bearer")),
            expires_in=int(data.get("expires_in", 0) or 0),
            scope=str(data.get("scope", "")),
        )

    def get_subreddit_posts(
        self,
        subreddit: str,
        sort: PostSort,
        limit: int,
        token: AuthToken,
    ) -> list[PostSummary]:
        if not 1 <= limit <= 100:
            raise ConfigError("Invalid post limit. Enter a number 1-100.")

        posts, _ = self._fetch_listing_page(subreddit, sort, limit, None, token)
        posts = [p for p in posts if not p.is_pinned]
        logger.info(f"Fetched {len(posts)} posts from r/{subreddit} ({PostSort(sort).value})")
        return posts

    def fetch_up_to(
        self,
        subreddit: str,
        sort: PostSort,
        limit: int,
        token: AuthToken,
    ) -> list[PostSummary]:
        fetched: list[PostSummary] = []
        after: Optional[str] = None
        used_cursors: set[str] = set()
        pages = 0

        while len(fetched) < limit:
            if pages >= self._max_pages:
                logger.warning(f"Stopped paging r/{subreddit} after {pages} pages")
                break

            page, next_after = self._fetch_listing_page(
                subreddit, sort, self._page_size, after, token
            )
            pages += 1

            new_posts = [p for p in page if not p.is_pinned]
            fetched.extend(new_posts)

            if not next_after or not new_posts:
                break
            if next_after in used_cursors:
                logger.warning(f"Listing cursor {next_after} repeated; stopping")
                break

            used_cursors.add(next_after)
            after = next_after

        logger.info(f"Fetched {min(len(fetched), limit)} posts from r/{subreddit} in {pages} page(s)")
        return fetched[:limit]

    def get_post_comments(self, permalink: str) -> list[CommentNode]:
        url = f"{REDDIT_WEB_URL}{permalink}.json"
        payload = self._get_json(url, params={"raw_json": 1})
        comments = parse_comment_listing(payload)
        logger.info(f"Parsed {len(comments)} top-level comments for {permalink}")
        return comments

    def _fetch_listing_page(
        self,
        subreddit: str,
        sort: PostSort,
        limit: int,
        after: Optional[str],
        token: AuthToken,
    ) -> tuple[list[PostSummary], Optional[str]]:
        """Fetch one listing page. Returns (posts, next cursor)."""
        params: dict[str, Any] = {"limit": limit}
        if after:
            params["after"] = after

        url = f"{self.OAUTH_URL}/r/{subreddit}/{PostSort(sort).value}"
        data = self._get_json(
            url,
            params=params,
            headers={"Authorization": f"bearer {token.access_token}"},
        )

        try:
            listing = data["data"]
            children = listing["children"]
            posts = [self._parse_post(child["data"]) for child in children]
        except (KeyError, TypeError, AttributeError) as e:
            raise DecodeError(f"Failed to decode posts: {e}")

        next_after = listing.get("after")
        return posts, next_after if isinstance(next_after, str) else None

    @staticmethod
    def _parse_post(d: dict) -> PostSummary:
        """Map one listing entry to PostSummary.

        KeyError on missing id/title, TypeError when the entry is not an object.
        """
        if not isinstance(d, dict):
            raise TypeError(f"listing entry data is {type(d).__name__}, not an object")
        thumbnail = d.get("thumbnail")
        return PostSummary(
            id=d["id"],
            title=d["title"],
            body_text=d.get("selftext") or "",
            upvote_count=d.get("ups", 0) or 0,
            comment_count=d.get("num_comments", 0) or 0,
            permalink=d.get("permalink", ""),
            thumbnail_url=thumbnail if isinstance(thumbnail, str) else None,
            image_url=best_image_url(d),
            image_urls=all_image_urls(d),
            is_pinned=bool(d.get("stickied")),
        )

    def _get_json(self, url: str, params: dict, headers: Optional[dict] = None) -> Any:
        """GET a JSON document. Single attempt; errors mapped to the hierarchy."""
        try:
            response = self._session.get(
                url, params=params, headers=headers, timeout=self.REQUEST_TIMEOUT
            )
        except requests.RequestException as e:
            raise RedditFetchError(f"Failed to reach Reddit: {e}")

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.warning(f"Reddit returned HTTP {response.status_code} for {url}")
            raise ApiError(response.status_code, message)

        return self._decode(response, url)

    @staticmethod
    def _decode(response: requests.Response, what: str) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise DecodeError(f"Failed to decode response from {what}: {e}")

    @staticmethod
    def _error_message(response: requests.Response) -> Optional[str]:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            return None
        if isinstance(data, dict):
            for key in ("message", "error"):
                if isinstance(data.get(key), str):
                    return data[key]
        return None
