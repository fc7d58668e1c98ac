"""
Unit tests for configuration loading.
"""

import json

import yaml

from autoblog.config import DEFAULT_CONFIG, Config


class TestConfig:
    """Tests for Config."""

    def test_defaults(self):
        config = Config(use_env=False)
        assert config.get('quality.min_citations') == 2
        assert config.get('quality.max_similarity_with_existing_posts') == 0.85
        assert config.get('batch.attempt_multiplier') == 3
        assert config.get('missing.key', 'fallback') == 'fallback'

    def test_defaults_not_mutated(self):
        config = Config(overrides={'quality': {'min_citations': 5}}, use_env=False)
        assert config.get('quality.min_citations') == 5
        assert DEFAULT_CONFIG['quality']['min_citations'] == 2

    def test_yaml_file_merged(self, tmp_path):
        path = tmp_path / "autoblog.yaml"
        path.write_text(yaml.safe_dump({'quality': {'min_word_count': 1200}}), encoding="utf-8")
        config = Config(str(path), use_env=False)
        assert config.get('quality.min_word_count') == 1200
        assert config.get('quality.min_citations') == 2

    def test_json_file_merged(self, tmp_path):
        path = tmp_path / "autoblog.json"
        path.write_text(json.dumps({'site': {'base_url': 'https://blog.example.org'}}), encoding="utf-8")
        config = Config(str(path), use_env=False)
        assert config.get('site.base_url') == 'https://blog.example.org'

    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config(str(tmp_path / "nope.yaml"), use_env=False)
        assert config.get('quality.min_h2_sections') == 4

    def test_unsupported_format_uses_defaults(self, tmp_path):
        path = tmp_path / "autoblog.ini"
        path.write_text("[quality]\n", encoding="utf-8")
        config = Config(str(path), use_env=False)
        assert config.get('quality.min_h2_sections') == 4

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv('AUTOBLOG_QUALITY__MIN_WORD_COUNT', '1100')
        monkeypatch.setenv('AUTOBLOG_QUALITY__REQUIRED_SECTIONS', '["Problem", "References"]')
        monkeypatch.setenv('AUTOBLOG_SITE__BASE_URL', 'https://env.example')
        config = Config()
        assert config.get('quality.min_word_count') == 1100
        assert config.get('quality.required_sections') == ["Problem", "References"]
        assert config.get('site.base_url') == 'https://env.example'

    def test_well_known_env_vars(self, monkeypatch):
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-test')
        monkeypatch.setenv('BLOG_POSTS_PER_RUN', '2')
        config = Config()
        assert config.get('openai.api_key') == 'sk-test'
        assert config.get('batch.posts_per_run') == 2

    def test_env_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv('AUTOBLOG_QUALITY__MIN_WORD_COUNT', '1100')
        assert Config(use_env=False).get('quality.min_word_count') == 900

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "saved.yaml"
        config = Config(overrides={'batch': {'posts_per_run': 7}}, use_env=False)
        assert config.save(str(path))
        assert Config(str(path), use_env=False).get('batch.posts_per_run') == 7

    def test_save_without_path(self):
        assert Config(use_env=False).save() is False
