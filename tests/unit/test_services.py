"""
Unit tests for the generation client, notifications and keyword analysis.
"""

import pytest
import requests
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from autoblog.utils.generation import StructuredGenerator
from autoblog.utils.nlp import TextAnalyzer, keyword_in_text
from autoblog.utils.notify import notify_failure


def completion(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.response


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestStructuredGenerator:
    """Tests for StructuredGenerator."""

    @pytest.mark.asyncio
    async def test_no_key_returns_none(self, test_config):
        generator = StructuredGenerator(test_config)
        assert not generator.available
        assert await generator.generate("system", "user") is None

    @pytest.mark.asyncio
    async def test_json_object(self, test_config):
        completions = FakeCompletions(completion('{"claims": []}'))
        generator = StructuredGenerator(test_config, client=fake_client(completions))
        assert await generator.generate("system", "user") == {"claims": []}
        assert completions.kwargs["response_format"] == {"type": "json_object"}
        assert completions.kwargs["messages"][0] == {"role": "system", "content": "system"}

    @pytest.mark.asyncio
    async def test_invalid_json(self, test_config):
        generator = StructuredGenerator(test_config, client=fake_client(FakeCompletions(completion("{oops"))))
        assert await generator.generate("system", "user") is None

    @pytest.mark.asyncio
    async def test_non_object_payload(self, test_config):
        generator = StructuredGenerator(test_config, client=fake_client(FakeCompletions(completion("[1, 2]"))))
        assert await generator.generate("system", "user") is None

    @pytest.mark.asyncio
    async def test_missing_content(self, test_config):
        generator = StructuredGenerator(test_config, client=fake_client(FakeCompletions(completion(None))))
        assert await generator.generate("system", "user") is None

    @pytest.mark.asyncio
    async def test_api_error(self, test_config):
        import openai

        error = openai.OpenAIError("service unavailable")
        generator = StructuredGenerator(test_config, client=fake_client(FakeCompletions(error=error)))
        assert await generator.generate("system", "user") is None


class TestNotifyFailure:
    """Tests for notify_failure."""

    def test_without_webhook(self):
        with patch('autoblog.utils.notify.requests.post') as mock_post:
            assert notify_failure("batch failed", "") is False
            mock_post.assert_not_called()

    def test_posts_text(self):
        with patch('autoblog.utils.notify.requests.post') as mock_post:
            mock_post.return_value = MagicMock(status_code=200)
            assert notify_failure("batch failed", "https://hooks.example/abc") is True
            mock_post.assert_called_once()
            assert mock_post.call_args.kwargs["json"] == {"text": "batch failed"}

    def test_request_error(self):
        with patch('autoblog.utils.notify.requests.post') as mock_post:
            mock_post.side_effect = requests.ConnectionError("refused")
            assert notify_failure("batch failed", "https://hooks.example/abc") is False


class TestTextAnalyzer:
    """Tests for keyword tables."""

    def test_keyword_boundaries(self):
        assert keyword_in_text("ai", "ai agents are here")
        assert not keyword_in_text("ai", "email campaigns")
        assert keyword_in_text("next.js", "migrating to next.js 15")
        assert keyword_in_text("에이전트", "ai 에이전트를")

    def test_classify_text(self):
        analyzer = TextAnalyzer()
        assert analyzer.classify_text("Spring Boot on the JVM")[0] == "spring_backend"
        assert analyzer.classify_text("Nothing to see", default="misc") == ("misc", 0.0)

    def test_infer_tags(self):
        analyzer = TextAnalyzer()
        assert analyzer.infer_tags("Practical TypeScript patterns") == [
            "engineering", "practical-guide", "typescript", "api",
        ]
        assert analyzer.infer_tags("Building reliable CI pipelines")[2:] == ["ci-cd", "automation"]
        assert analyzer.infer_tags("Database indexing")[2:] == ["architecture", "backend"]
