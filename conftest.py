"""Shared pytest fixtures: a fake google-genai client and response builders."""
import os
from types import SimpleNamespace

# Must be set before config is imported by any test module
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from google.genai import types

from gateway import services as gateway_services


class FakeModels:
    """Stands in for ``client.aio.models``; replays queued responses or exceptions."""

    def __init__(self):
        self.content_responses = []
        self.image_responses = []
        self.calls = []

    @staticmethod
    def _next(queue):
        if not queue:
            raise RuntimeError("no fake response queued")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"method": "generate_content", "model": model, "contents": contents, "config": config})
        return self._next(self.content_responses)

    async def generate_images(self, model, prompt, config=None):
        self.calls.append({"method": "generate_images", "model": model, "prompt": prompt, "config": config})
        return self._next(self.image_responses)


class FakeClient:
    def __init__(self):
        self.models = FakeModels()
        self.aio = SimpleNamespace(models=self.models)


def _text_response(text):
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part.from_text(text=text)]))]
    )


def _inline_image_response(data=b"edited-bytes", mime_type="image/png", text=None):
    parts = []
    if text:
        parts.append(types.Part.from_text(text=text))
    if data is not None:
        parts.append(types.Part(inline_data=types.Blob(mime_type=mime_type, data=data)))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def _imagen_response(data=b"jpeg-bytes"):
    if data is None:
        return types.GenerateImagesResponse(generated_images=[])
    return types.GenerateImagesResponse(
        generated_images=[types.GeneratedImage(image=types.Image(image_bytes=data, mime_type="image/jpeg"))]
    )


@pytest.fixture
def fake_client(monkeypatch):
    """Route every gateway call through a FakeClient."""
    client = FakeClient()
    monkeypatch.setattr(gateway_services, "_get_client", lambda: client)
    return client


@pytest.fixture
def responses():
    """Builders for google-genai response objects."""
    return SimpleNamespace(
        text=_text_response,
        inline_image=_inline_image_response,
        imagen=_imagen_response,
    )
