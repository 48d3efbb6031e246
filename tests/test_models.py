"""Simple tests for models, prompts, validation, error classification and settings."""

import httpx
import openai
import pytest

from app.config import ConfigurationError, Settings, load_settings
from app.core.errors import (
    ErrorCode,
    RelayError,
    UpstreamConfigurationError,
    classify_upstream_error,
)
from app.core.prompts import SYSTEM_PROMPTS, ConversationMode, get_system_prompt
from app.core.ui_stream import UIMessageStream
from app.core.validator import validate_chat_payload
from app.models.chat import ChatMessage


def test_message_from_parts():
    """Test that text parts are joined and other parts dropped."""
    message = ChatMessage(
        id="m1",
        role="user",
        parts=[
            {"type": "text", "text": "Hello "},
            {"type": "file", "url": "https://example.com/a.png"},
            {"type": "text", "text": "world"},
        ],
    )
    assert message.to_model_message() == {"role": "user", "content": "Hello world"}


def test_message_from_string_content():
    """Test the plain string content shorthand."""
    message = ChatMessage(role="assistant", content="Hi")
    assert message.to_model_message() == {"role": "assistant", "content": "Hi"}


@pytest.mark.parametrize("mode", ["panel", "custom", "general", "unknown", None, ConversationMode.PANEL])
def test_every_mode_resolves_to_panel_prompt(mode):
    """Test that the prompt selector always falls back to the panel prompt."""
    assert get_system_prompt(mode) == SYSTEM_PROMPTS[ConversationMode.PANEL]


def test_panel_prompt_is_unchanged():
    """Test that the panel prompt still names its panelists."""
    prompt = get_system_prompt()
    assert prompt.startswith("We are in a panel of experts")
    assert "Pema Chödrön" in prompt
    assert "**Only 3 of them may speak in answer to a question!**" in prompt


def test_validator_preserves_order():
    """Test that validated messages keep the caller's order."""
    body = {"messages": [{"role": "user", "content": str(i)} for i in range(5)]}
    messages = validate_chat_payload(body)
    assert [m.text_content() for m in messages] == ["0", "1", "2", "3", "4"]


@pytest.mark.parametrize(
    "body,status",
    [
        (None, 400),
        ({"msgs": []}, 400),
        ({"messages": 3}, 400),
        ({"messages": []}, 422),
        ({"messages": [{"role": "user", "content": "x"}] * 21}, 422),
        ({"messages": [{"content": "no role"}]}, 400),
    ],
)
def test_validator_rejections(body, status):
    """Test the validator's status codes."""
    with pytest.raises(RelayError) as exc_info:
        validate_chat_payload(body)
    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.status_code == status


@pytest.mark.parametrize(
    "message,status",
    [
        ("Incorrect API key provided", 401),
        ("401 Unauthorized", 401),
        ("Rate limit reached for requests", 429),
        ("Error code: 429", 429),
        ("Network error while contacting upstream", 503),
        ("fetch failed", 503),
        ("502 Bad Gateway", 503),
        ("Service returned 503", 503),
    ],
)
def test_classify_by_message(message, status):
    """Test the substring heuristic for upstream failures."""
    error = classify_upstream_error(Exception(message))
    assert error.code == ErrorCode.UPSTREAM_ERROR
    assert error.status_code == status


def test_classify_missing_upstream_key():
    """Test that an unconfigured upstream key is reported as an auth failure."""
    error = classify_upstream_error(
        UpstreamConfigurationError("Invalid API key: NOUS_API_KEY is not set")
    )
    assert error.code == ErrorCode.UPSTREAM_ERROR
    assert error.status_code == 401


def test_classify_unmatched_is_internal():
    """Test that unknown failures fall back to a generic 500."""
    error = classify_upstream_error(KeyError("choices"))
    assert error.code == ErrorCode.INTERNAL_ERROR
    assert error.status_code == 500


def test_classify_by_status_code():
    """Test that structured SDK errors are classified by status code."""
    request = httpx.Request("POST", "https://inference.test/v1/chat/completions")
    response = httpx.Response(503, request=request)
    error = classify_upstream_error(
        openai.InternalServerError("upstream overloaded", response=response, body=None)
    )
    assert error.code == ErrorCode.UPSTREAM_ERROR
    assert error.status_code == 503


def test_error_envelope_shape():
    """Test the camelCase envelope sent to clients."""
    envelope = RelayError(ErrorCode.VALIDATION_ERROR, "bad", 422).to_envelope("req-1")
    assert envelope == {
        "error": {
            "code": "validation_error",
            "message": "bad",
            "statusCode": 422,
            "requestId": "req-1",
        }
    }


def test_ui_stream_without_text():
    """Test that an empty reply still opens and closes the message."""
    stream = UIMessageStream(message_id="msg-1")
    body = stream.start() + stream.finish()
    assert '"messageId":"msg-1"' in body
    assert "text-start" not in body
    assert body.endswith("data: [DONE]\n\n")


def test_load_settings_lists_missing(monkeypatch):
    """Test that startup validation names every missing variable."""
    for name in ("AUTH_GOOGLE_ID", "AUTH_GOOGLE_SECRET", "AUTH_SECRET"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env_file=None)
    for name in ("AUTH_GOOGLE_ID", "AUTH_GOOGLE_SECRET", "AUTH_SECRET"):
        assert name in str(exc_info.value)


def test_load_settings_skipped_during_build(monkeypatch):
    """Test that validation is skipped in the build phase."""
    monkeypatch.delenv("AUTH_SECRET", raising=False)
    settings = load_settings(_env_file=None, build_phase=True)
    assert settings.build_phase is True


def test_settings_defaults(monkeypatch):
    """Test the built-in model and mode defaults."""
    for name in ("HERMES_MODEL", "BUDDHABOT_MODE", "NOUS_API_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.hermes_model == "Hermes-4-405B"
    assert settings.buddhabot_mode == "panel"
    assert settings.nous_api_base_url == "https://inference-api.nousresearch.com/v1"
    assert settings.test_account_enabled is False
