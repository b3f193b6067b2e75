"""Application context: settings, adapters, services and the shared slot."""

import logging
from pathlib import Path
from typing import Optional

from redtools.adapters.gemini_adapter import GeminiAdapter
from redtools.adapters.oauth_adapter import RedditOAuthAdapter
from redtools.core.config_manager import ConfigManager
from redtools.core.shared_store import SharedContentStore
from redtools.core.types import GeminiModel, SharedContent
from redtools.services.action_guard import ActionGuard
from redtools.services.discussion_service import DiscussionService
from redtools.services.writing_service import WritingService

logger = logging.getLogger("redtools")


class AppContext:
    """Everything a front end needs, built from settings in one place.

    Startup sequence:
    1. ConfigManager (loads or creates settings.yaml)
    2. Adapters (GeminiAdapter, RedditOAuthAdapter)
    3. Services (DiscussionService, WritingService) and the ActionGuard
    4. SharedContentStore, opened lazily on first use

    Settings are read here and again only on save_gemini() or refresh().
    """

    def __init__(self, config_path: Optional[Path] = None,
                 store_path: Optional[Path] = None):
        self.config = ConfigManager(config_path)
        self._store_path = store_path
        self._store: Optional[SharedContentStore] = None
        self.shared_content: Optional[SharedContent] = None
        self.guard = ActionGuard()

        self.gemini = self._build_gemini()
        if not self.gemini.has_credentials:
            logger.warning("Gemini API key is not configured.")
        self.reddit = self._build_reddit()
        self.discussions = DiscussionService(
            self.reddit,
            self.gemini,
            fetch_delay_sec=self.config.get("reddit.fetch_delay_sec", 0.5),
        )
        self.writing = WritingService(self.gemini)

    def _build_gemini(self) -> GeminiAdapter:
        return GeminiAdapter(
            api_key=self.config.get("gemini.api_key", ""),
            model=self.config.get("gemini.model", GeminiModel.FLASH.value),
            timeout=self.config.get("gemini.timeout", 60),
        )

    def _build_reddit(self) -> RedditOAuthAdapter:
        return RedditOAuthAdapter(
            client_id=self.config.get("reddit.client_id", ""),
            client_secret=self.config.get("reddit.client_secret", ""),
            username=self.config.get("reddit.username", ""),
            password=self.config.get("reddit.password", ""),
            user_agent=self.config.get("reddit.user_agent", "subreddit_summarizer/1.0"),
            page_size=self.config.get("reddit.page_size", 25),
            max_pages=self.config.get("reddit.max_pages", 40),
        )

    @property
    def store(self) -> SharedContentStore:
        if self._store is None:
            path = self._store_path or self.config.resolve_path("shared.store_path", "db/shared.db")
            self._store = SharedContentStore(path)
            self._store.subscribe(self._on_shared_content)
        return self._store

    def _on_shared_content(self, content: SharedContent) -> None:
        self.shared_content = content

    def save_gemini(self, api_key: str, model: GeminiModel) -> None:
        """Persist the Gemini settings and swap in a fresh adapter."""
        self.config.update({"gemini.api_key": api_key, "gemini.model": model})
        self._rebuild_gemini()
        logger.info(f"Saved Gemini settings (model: {self.gemini.model})")

    def _rebuild_gemini(self) -> None:
        self.gemini = self._build_gemini()
        self.discussions.set_llm(self.gemini)
        self.writing.set_llm(self.gemini)

    def refresh(self) -> Optional[SharedContent]:
        """Re-read settings and the shared slot (e.g. when the app becomes active)."""
        self.config.reload()
        self._rebuild_gemini()
        latest = self.store.read()
        if latest != self.shared_content:
            self.shared_content = latest
            logger.info("Shared content updated")
        return self.shared_content

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
