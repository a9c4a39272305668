"""Tests for environment-driven configuration."""
import pytest

from fetchlint.analyzer.engine import AnalysisOptions
from fetchlint.config import Config, get_config, reset_config


class TestConfig:

    def test_defaults(self, tmp_path):
        """Test defaults when no variables are set."""
        config = Config(env_path=tmp_path / '.env')
        assert config.target_name == 'fetch'
        assert config.require_query_builder is True
        assert config.enabled_rules is None
        assert config.analysis_options() == AnalysisOptions()

    def test_environment_overrides(self, monkeypatch, tmp_path):
        """Test that environment variables override the defaults."""
        monkeypatch.setenv('FETCHLINT_TARGET', 'request')
        monkeypatch.setenv('FETCHLINT_REQUIRE_QUERY_BUILDER', 'off')
        monkeypatch.setenv('FETCHLINT_RULES', 'require-timeout, prefer-async-await,')
        config = Config(env_path=tmp_path / '.env')
        assert config.enabled_rules == ['require-timeout', 'prefer-async-await']
        assert config.analysis_options() == AnalysisOptions(require_query_builder=False, target_name='request')

    def test_boolean_spellings(self, monkeypatch, tmp_path):
        """Test the accepted boolean spellings."""
        for raw, expected in (('1', True), ('YES', True), ('on', True), ('0', False), ('False', False), ('no', False)):
            monkeypatch.setenv('FETCHLINT_REQUIRE_QUERY_BUILDER', raw)
            assert Config(env_path=tmp_path / '.env').require_query_builder is expected, raw

    def test_invalid_boolean(self, monkeypatch, tmp_path):
        """Verify a malformed boolean raises ValueError."""
        monkeypatch.setenv('FETCHLINT_REQUIRE_QUERY_BUILDER', 'maybe')
        with pytest.raises(ValueError, match='FETCHLINT_REQUIRE_QUERY_BUILDER'):
            Config(env_path=tmp_path / '.env')

    def test_unknown_rule(self, monkeypatch, tmp_path):
        """Verify an unknown rule id raises ValueError."""
        monkeypatch.setenv('FETCHLINT_RULES', 'require-timeout,no-such-rule')
        with pytest.raises(ValueError, match='no-such-rule'):
            Config(env_path=tmp_path / '.env')

    def test_dotenv_file(self, monkeypatch, tmp_path):
        """Test loading values from a .env file."""
        env_file = tmp_path / '.env'
        env_file.write_text("FETCHLINT_TARGET=ky\n")
        # load_dotenv writes into os.environ; let monkeypatch restore it
        monkeypatch.setenv('FETCHLINT_TARGET', '')
        monkeypatch.delenv('FETCHLINT_TARGET')
        assert Config(env_path=env_file).target_name == 'ky'


class TestSingleton:

    def test_get_config_is_cached(self, monkeypatch, tmp_path):
        """Verify get_config() returns the same instance until reset."""
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first
