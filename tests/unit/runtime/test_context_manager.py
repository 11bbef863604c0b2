"""Unit tests for the application context manager."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.mylibrary.runtime.config.config_data import AuthConfig, ConfigData
from src.mylibrary.runtime.context import (
    AppContext,
    get_config,
    get_context,
    merge_configs,
    set_config,
    with_context,
)


class TestContextManager:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        """Should have a default context available."""
        context = get_context()
        config = get_config()

        assert isinstance(context, AppContext)
        assert isinstance(config, ConfigData)
        assert context.config is config

    def test_with_context_override_single_level(self):
        """Should override config for the duration of the context manager."""
        original_config = get_config()
        original_ttl = original_config.auth.token_ttl_seconds

        test_config = ConfigData()
        test_config.auth.token_ttl_seconds = 60

        with with_context(test_config):
            override_config = get_config()
            assert override_config.auth.token_ttl_seconds == 60
            assert override_config is not original_config

        after_config = get_config()
        assert after_config.auth.token_ttl_seconds == original_ttl
        assert after_config is original_config

    def test_with_context_nested_overrides(self):
        """Should handle nested context overrides correctly."""
        original_config = get_config()

        level1_config = ConfigData()
        level1_config.app.environment = "test"
        level1_config.app.port = 8001

        with with_context(level1_config):
            assert get_config().app.environment == "test"
            assert get_config().app.port == 8001

            level2_config = ConfigData()
            level2_config.app.port = 8002
            level2_config.database.url = "sqlite:///level2.db"

            with with_context(level2_config):
                level2 = get_config()
                assert level2.app.environment == "test"
                assert level2.app.port == 8002
                assert level2.database.url == "sqlite:///level2.db"

            back_to_level1 = get_config()
            assert back_to_level1.app.port == 8001
            assert back_to_level1.database.url == original_config.database.url

        assert get_config() is original_config

    def test_with_context_no_override(self):
        """Should work without any override (current context)."""
        original_config = get_config()

        with with_context():
            assert get_config() is original_config

        assert get_config() is original_config

    def test_with_context_rejects_other_types(self):
        with pytest.raises(ValueError, match="config_override must be ConfigData"):
            with with_context({"app": {"port": 1}}):
                pass

    def test_exception_handling_in_context(self):
        """Should properly restore context even when exceptions occur."""
        original_config = get_config()

        test_config = ConfigData()
        test_config.auth.issuer = "exception-test"

        with pytest.raises(RuntimeError):
            with with_context(test_config):
                assert get_config().auth.issuer == "exception-test"
                raise RuntimeError("boom")

        assert get_config() is original_config

    def test_constructor_set_sections_are_merged(self):
        override = ConfigData(auth=AuthConfig(token_signing_secret="s3cret"))

        with with_context(override):
            config = get_config()
            assert config.auth.token_signing_secret == "s3cret"
            assert config.database.url == get_context().config.database.url

    def test_context_isolated_between_threads(self):
        """Overrides in one thread are invisible to another."""
        original_ttl = get_config().auth.token_ttl_seconds
        override = ConfigData()
        override.auth.token_ttl_seconds = 5

        def read_ttl() -> int:
            return get_config().auth.token_ttl_seconds

        with with_context(override):
            with ThreadPoolExecutor(max_workers=1) as pool:
                other_thread_ttl = pool.submit(read_ttl).result()
            assert read_ttl() == 5

        assert other_thread_ttl == original_ttl


class TestMergeConfigs:
    def test_unset_fields_keep_base_values(self):
        base = ConfigData()
        base.app.port = 9000
        override = ConfigData()
        override.logging.level = "DEBUG"

        merged = merge_configs(base, override)

        assert merged.app.port == 9000
        assert merged.logging.level == "DEBUG"

    def test_set_config_replaces_whole_config(self):
        original_config = get_config()
        replacement = ConfigData()
        replacement.app.host = "replaced"

        with with_context(ConfigData()):
            set_config(replacement)
            assert get_config() is replacement

        assert get_config() is original_config
