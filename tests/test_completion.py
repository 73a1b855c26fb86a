from types import SimpleNamespace

import pytest

from smartspend.completion import GeminiCompletionService, create_completion_service
from smartspend.config import AppConfig
from smartspend.errors import CompletionUnavailable


class FakeModels:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    def generate_content(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def _service(models):
    return GeminiCompletionService(api_key=None, model="gemini-test", client=SimpleNamespace(models=models))


def test_complete_returns_text_and_passes_generation_config():
    models = FakeModels(result=SimpleNamespace(text='{"ok": true}'))

    text = _service(models).complete("system", "prompt", temperature=0.2, max_tokens=512)

    assert text == '{"ok": true}'
    assert models.kwargs["model"] == "gemini-test"
    assert models.kwargs["contents"] == "prompt"
    config = models.kwargs["config"]
    assert config.system_instruction == "system"
    assert config.temperature == 0.2
    assert config.max_output_tokens == 512
    assert config.response_mime_type == "application/json"


@pytest.mark.parametrize("result", [SimpleNamespace(text=""), SimpleNamespace(text=None), SimpleNamespace()])
def test_empty_response_is_unavailable(result):
    with pytest.raises(CompletionUnavailable):
        _service(FakeModels(result=result)).complete("s", "p", temperature=0.2, max_tokens=10)


def test_sdk_errors_are_wrapped():
    error = TimeoutError("read timed out")

    with pytest.raises(CompletionUnavailable) as excinfo:
        _service(FakeModels(error=error)).complete("s", "p", temperature=0.2, max_tokens=10)

    assert excinfo.value.__cause__ is error


def test_missing_key_without_client_is_unavailable():
    with pytest.raises(CompletionUnavailable):
        GeminiCompletionService(api_key=None)


def test_create_completion_service_needs_key():
    assert create_completion_service(AppConfig(gemini_api_key=None)) is None


def test_create_completion_service_uses_config():
    service = create_completion_service(
        AppConfig(gemini_api_key="test-key", gemini_model="gemini-x", request_timeout_seconds=5)
    )

    assert service.model == "gemini-x"
    assert service.timeout_seconds == 5
