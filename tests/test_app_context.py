"""Tests for AppContext wiring."""

import pytest
from unittest.mock import patch

from redtools.app_context import AppContext
from redtools.core.config_manager import ConfigManager
from redtools.core.shared_store import SharedContentStore
from redtools.core.types import GeminiModel


@pytest.fixture
def context(config_file):
    c = AppContext(config_path=config_file)
    yield c
    c.close()


class TestAppContext:
    def test_built_from_settings(self, context):
        assert context.gemini.has_credentials
        assert context.gemini.model == GeminiModel.FLASH.value
        assert context.reddit._client_id == "cid"
        assert context.discussions._fetch_delay == 0

    def test_store_is_lazy_and_uses_configured_path(self, context, tmp_dir):
        assert context._store is None
        store = context.store
        assert store is context.store
        assert store._db_path == tmp_dir / "shared.db"

    def test_explicit_store_path_wins(self, config_file, tmp_dir):
        custom = tmp_dir / "other" / "slot.db"
        c = AppContext(config_path=config_file, store_path=custom)
        try:
            assert c.store._db_path == custom
        finally:
            c.close()

    def test_publish_in_process_updates_shared_content(self, context):
        context.store.publish("shared text", updated_at=1.0)
        assert context.shared_content.text == "shared text"

    def test_refresh_sees_other_process(self, context, tmp_dir):
        other = SharedContentStore(tmp_dir / "shared.db")
        try:
            other.publish("from another process", updated_at=2.0)
        finally:
            other.close()

        content = context.refresh()
        assert content.text == "from another process"
        assert context.shared_content == content

    def test_refresh_reloads_settings(self, context, config_file):
        ConfigManager(config_file).update({"gemini.model": GeminiModel.PRO})
        context.refresh()
        assert context.gemini.model == GeminiModel.PRO.value

    def test_save_gemini_rebuilds_adapter_everywhere(self, context, config_file):
        old = context.gemini
        context.save_gemini(" new-key ", GeminiModel.FLASH_8B)

        assert context.gemini is not old
        assert context.gemini.model == GeminiModel.FLASH_8B.value
        assert context.discussions._llm is context.gemini
        assert context.writing._llm is context.gemini
        assert ConfigManager(config_file).get("gemini.api_key") == "new-key"

    def test_missing_key_logs_warning(self, tmp_dir):
        with patch("redtools.app_context.logger") as mock_logger:
            c = AppContext(config_path=tmp_dir / "settings.yaml", store_path=tmp_dir / "s.db")
        c.close()
        assert not c.gemini.has_credentials
        mock_logger.warning.assert_called_once()

    def test_close_is_idempotent(self, context):
        context.store
        context.close()
        context.close()
        assert context._store is None
