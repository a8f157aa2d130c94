import asyncio

import pytest

from backend.core.llm import LLMServiceError, TextGenerationClient


class FakeMessage:
    def __init__(self, content):
        self.content = content


class FakeGeminiModel:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return FakeMessage(self.content)


def _client_with(model):
    client = TextGenerationClient()
    client._gemini_clients["gemini-test"] = model
    return client


def test_gemini_string_content_is_returned_as_is():
    client = _client_with(FakeGeminiModel(content="Question: Q\nResult: Correct"))

    text = asyncio.run(client.generate("grade this", "gemini", "gemini-test"))

    assert text == "Question: Q\nResult: Correct"


def test_gemini_content_parts_are_joined_into_text():
    model = FakeGeminiModel(content=[
        {"type": "text", "text": "Question: Q\n"},
        {"type": "text", "text": "Result: Correct"},
        "\nJustification: ok",
    ])
    client = _client_with(model)

    text = asyncio.run(client.generate("grade this", "gemini", "gemini-test"))

    assert text == "Question: Q\nResult: Correct\nJustification: ok"
    assert model.calls[0][0].content == "grade this"


def test_gemini_failure_becomes_service_error():
    client = _client_with(FakeGeminiModel(error=RuntimeError("quota exceeded")))

    with pytest.raises(LLMServiceError) as excinfo:
        asyncio.run(client.generate("grade this", "gemini", "gemini-test"))

    assert excinfo.value.service == "gemini"
    assert excinfo.value.model == "gemini-test"
    assert "quota exceeded" in str(excinfo.value)


def test_resolve_falls_back_to_openai_and_default_model():
    assert TextGenerationClient.resolve("claude", None) == ("openai", "gpt-4o-mini")
    assert TextGenerationClient.resolve("gemini", None) == ("gemini", "gemini-1.5-flash")
