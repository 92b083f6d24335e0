"""Tests for the Ollama HTTP client and CLI wrapper."""

import pytest
import requests
from unittest.mock import Mock, patch

from cc_cli.errors import CommandFailedError
from cc_cli.infra.ollama import OllamaCli, OllamaClient, list_ollama_models, model_installed
from cc_cli.infra.retry import RetryPolicy

from conftest import FakeRunner


def _no_retry():
    return RetryPolicy(max_retries=0, sleep=lambda _: None)


class TestListOllamaModels:
    """Test suite for list_ollama_models function."""

    def test_list_models_success(self):
        """Test successful retrieval of models from Ollama API."""
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = {
            "models": [
                {"name": "phi:latest", "size": 1000000},
                {"name": "cc-r1:8b", "size": 2000000},
            ]
        }

        with patch("requests.get", return_value=mock_response) as mock_get:
            result = list_ollama_models("http://localhost:11434/")

            mock_get.assert_called_once_with("http://localhost:11434/api/tags", timeout=10)
            assert result == ["phi:latest", "cc-r1:8b"]

    def test_list_models_connection_error(self):
        """Test handling of connection errors."""
        with patch("requests.get", side_effect=requests.exceptions.ConnectionError()):
            assert list_ollama_models("http://localhost:11434") == []

    def test_list_models_http_error(self):
        """Test handling of HTTP errors (4xx, 5xx)."""
        mock_response = Mock()
        mock_response.status_code = 500
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError()

        with patch("requests.get", return_value=mock_response):
            assert list_ollama_models("http://localhost:11434") == []

    def test_list_models_malformed_model_entries(self):
        """Test handling of malformed model entries in the list."""
        mock_response = Mock()
        mock_response.json.return_value = {
            "models": [
                {"name": "phi:latest"},
                {"size": 1000000},
                "invalid_entry",
                {"name": "mistral:latest"},
            ]
        }

        with patch("requests.get", return_value=mock_response):
            assert list_ollama_models("http://localhost:11434") == ["phi:latest", "mistral:latest"]

    def test_list_models_missing_models_key(self):
        """Test handling of response missing 'models' key."""
        mock_response = Mock()
        mock_response.json.return_value = {"error": "something went wrong"}

        with patch("requests.get", return_value=mock_response):
            assert list_ollama_models("http://localhost:11434") == []


class TestModelInstalled:
    """Test suite for tag matching."""

    @pytest.mark.parametrize(
        "model,installed,expected",
        [
            ("phi", ["phi:latest"], True),
            ("gemma:2b", ["gemma:2b"], True),
            ("mistral", ["mistral-nemo:latest"], False),
            ("mistral", [], False),
        ],
    )
    def test_matching(self, model, installed, expected):
        """Test that bare names match their :latest tag only."""
        assert model_installed(model, installed) is expected


class TestOllamaClient:
    """Test suite for OllamaClient.generate."""

    def test_generate_posts_payload(self):
        """Test the request body and response extraction."""
        mock_response = Mock()
        mock_response.json.return_value = {"response": "Paris"}

        with patch("requests.post", return_value=mock_response) as mock_post:
            client = OllamaClient("http://localhost:11434/", timeout=30, retry_policy=_no_retry())
            assert client.generate("phi", "Capital of France?") == "Paris"

        mock_post.assert_called_once_with(
            "http://localhost:11434/api/generate",
            json={
                "model": "phi",
                "prompt": "Capital of France?",
                "options": {"temperature": 0.0},
                "stream": False,
            },
            timeout=30,
        )

    def test_missing_response_key(self):
        """Test that a body without 'response' is rejected."""
        mock_response = Mock()
        mock_response.json.return_value = {"error": "model not found"}

        with patch("requests.post", return_value=mock_response):
            client = OllamaClient(retry_policy=_no_retry())
            with pytest.raises(ValueError, match="Missing 'response'"):
                client.generate("nope", "hi")

    def test_http_error_propagates(self):
        """Test that HTTP errors are raised to the caller."""
        error_response = Mock(status_code=404)
        mock_response = Mock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=error_response)

        with patch("requests.post", return_value=mock_response):
            client = OllamaClient(retry_policy=_no_retry())
            with pytest.raises(requests.exceptions.HTTPError):
                client.generate("phi", "hi")

    def test_connection_error_is_retried(self):
        """Test that network errors are retried before succeeding."""
        ok = Mock()
        ok.json.return_value = {"response": "Paris"}
        policy = RetryPolicy(max_retries=2, sleep=lambda _: None)

        with patch("requests.post", side_effect=[requests.exceptions.ConnectionError(), ok]) as mock_post:
            assert OllamaClient(retry_policy=policy).generate("phi", "hi") == "Paris"

        assert mock_post.call_count == 2


class TestOllamaCli:
    """Test suite for the ollama CLI wrapper."""

    def test_list_table_returns_raw_output(self):
        """Test that `ollama list` output is passed through unchanged."""
        table = "NAME            ID      SIZE   MODIFIED\nphi:latest      abc     1.6GB  2 days ago\n"
        runner = FakeRunner().on("ollama", "list", stdout=table)
        assert OllamaCli(runner).list_table() == table

    def test_list_table_failure_raises(self):
        """Test that a failing `ollama list` raises CommandFailedError."""
        runner = FakeRunner().on("ollama", "list", returncode=1, stderr="could not connect")

        with pytest.raises(CommandFailedError):
            OllamaCli(runner).list_table()

    def test_pull_failure_raises(self):
        """Test that a failed pull raises CommandFailedError."""
        runner = FakeRunner().on_interactive("ollama", "pull", returncode=1)

        with pytest.raises(CommandFailedError):
            OllamaCli(runner).pull("phi")

    def test_run_verbose(self):
        """Test the ollama run command line."""
        runner = FakeRunner()

        OllamaCli(runner).run("phi", ["Hello", "there"], verbose=True)

        assert runner.interactive_calls == [["ollama", "run", "phi", "--verbose", "Hello", "there"]]
