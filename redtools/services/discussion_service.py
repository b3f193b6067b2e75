"""Discussion service: fetch Reddit threads and summarize them."""

import logging
import time
from typing import Callable, Optional

from redtools.adapters.llm_adapter import LLMAdapter
from redtools.adapters.reddit_adapter import RedditAdapter
from redtools.core.comment_tree import count_comments, render_comments
from redtools.core.types import AuthToken, CommentNode, PostSort, PostSummary

logger = logging.getLogger("redtools")

ProgressCallback = Callable[[str], None]


class DiscussionService:
    """Orchestrates Reddit fetching and Gemini summarization.

    Responsibilities:
    - Authenticate once and reuse the token for listing calls
    - Fetch posts (single page or paginated) and comment trees
    - Fetch comments for many posts, one at a time with a fixed delay
    - Build export text and summary / question prompts
    """

    def __init__(self, reddit: RedditAdapter, llm: LLMAdapter,
                 fetch_delay_sec: float = 0.5,
                 sleep: Callable[[float], None] = time.sleep):
        self._reddit = reddit
        self._llm = llm
        self._fetch_delay = fetch_delay_sec
        self._sleep = sleep
        self._token: Optional[AuthToken] = None

    def set_llm(self, llm: LLMAdapter) -> None:
        self._llm = llm

    def _ensure_token(self) -> AuthToken:
        if self._token is None:
            self._token = self._reddit.authenticate()
        return self._token

    def fetch_posts(self, subreddit: str, sort: PostSort = PostSort.NEW,
                    limit: int = 50) -> list[PostSummary]:
        """Fetch one listing page (limit 1-100), pinned posts removed.

        Raises:
            ConfigError, AuthenticationError, NetworkError, ApiError, DecodeError
        """
        token = self._ensure_token()
        return self._reddit.get_subreddit_posts(subreddit, sort, limit, token)

    def fetch_up_to(self, subreddit: str, sort: PostSort = PostSort.NEW,
                    limit: int = 50) -> list[PostSummary]:
        """Fetch up to limit posts across as many pages as needed."""
        token = self._ensure_token()
        return self._reddit.fetch_up_to(subreddit, sort, limit, token)

    def fetch_comments(self, post: PostSummary) -> list[CommentNode]:
        """Fetch the comment tree of one post."""
        return self.fetch_thread(post.permalink)

    def fetch_thread(self, permalink: str) -> list[CommentNode]:
        """Fetch the comment tree behind a permalink. No token needed."""
        return self._reddit.get_post_comments(permalink)

    def fetch_all_comments(self, posts: list[PostSummary],
                           progress: Optional[ProgressCallback] = None) -> list[CommentNode]:
        """Fetch comments for each post in order and concatenate the forests.

        Posts are processed strictly one after another with fetch_delay_sec
        between requests. The first failure aborts the whole run.
        """
        combined: list[CommentNode] = []
        for index, post in enumerate(posts):
            if progress:
                progress(f"Fetching comments for post {index + 1} of {len(posts)}...")
            combined.extend(self.fetch_comments(post))
            if index < len(posts) - 1 and self._fetch_delay > 0:
                self._sleep(self._fetch_delay)

        logger.info(f"Fetched {count_comments(combined)} comments from {len(posts)} posts")
        return combined

    def collect_subreddit(self, subreddit: str, sort: PostSort = PostSort.NEW,
                          limit: int = 50,
                          progress: Optional[ProgressCallback] = None) -> list[CommentNode]:
        """Paginated post fetch followed by the sequential comment fetch."""
        if progress:
            progress(f"Fetching up to {limit} {PostSort(sort).display_name} posts for r/{subreddit}...")
        posts = self.fetch_up_to(subreddit, sort, limit)
        comments = self.fetch_all_comments(posts, progress)
        if progress:
            progress(f"Fetched {count_comments(comments)} total comments!")
        return comments

    def export_text(self, comments: list[CommentNode]) -> str:
        """Prompt preamble plus flattened comments, ready to paste elsewhere."""
        return self._build_export_text(render_comments(comments))

    def summarize_comments(self, comments: list[CommentNode]) -> str:
        """Summarize the comments of a single thread.

        Raises:
            ConfigError, NetworkError, ApiError, ParseError
        """
        prompt = self._build_thread_summary_prompt(render_comments(comments))
        return self._llm.complete(prompt)

    def summarize_subreddit_comments(self, comments: list[CommentNode]) -> str:
        """Summarize comments gathered from many posts of one subreddit."""
        prompt = self._build_subreddit_summary_prompt(render_comments(comments))
        return self._llm.complete(prompt)

    def ask_question(self, comments: list[CommentNode], question: str,
                     multi_post: bool = False) -> Optional[str]:
        """Answer a question about the comments. Blank questions are ignored."""
        if not question.strip():
            return None
        flattened = render_comments(comments)
        if multi_post:
            prompt = self._build_subreddit_question_prompt(flattened, question)
        else:
            prompt = self._build_thread_question_prompt(flattened, question)
        return self._llm.complete(prompt)

    @staticmethod
    def _build_export_text(flattened: str) -> str:
        preamble = (
            "You are the best content writer in the world! These are a Reddit post's comments.\n"
            "Summarise the key themes and main points. Identify the top points or themes "
            "discussed in the comments, with examples for each. Include a brief overview "
            "of any major differing viewpoints if present."
        )
        return preamble + "\n\n" + flattened

    @staticmethod
    def _build_thread_summary_prompt(flattened: str) -> str:
        return (
            "Summarize the following Reddit comments, summarizing key themes and main "
            "points, with examples. Provide a final summary of overall comments:\n"
            f"{flattened}"
        )

    @staticmethod
    def _build_subreddit_summary_prompt(flattened: str) -> str:
        return (
            "Provide a detailed summary of the following Reddit comments from multiple "
            "posts within this subreddit. Identify and explain the primary topics and "
            "discussions being addressed. Highlight key themes, recurring viewpoints, and "
            "any significant patterns or trends present in the conversations. Ensure the "
            "summary is clear, well-structured:\n"
            "\n"
            f"{flattened}"
        )

    @staticmethod
    def _build_thread_question_prompt(flattened: str, question: str) -> str:
        return (
            "Let's consider these Reddit comments:\n"
            "\n"
            f"{flattened}\n"
            "\n"
            f"Now, answer the question: {question}"
        )

    @staticmethod
    def _build_subreddit_question_prompt(flattened: str, question: str) -> str:
        return (
            "We have these Reddit comments from multiple posts:\n"
            "\n"
            f"{flattened}\n"
            "\n"
            f"Based on the above, answer: {question}"
        )
