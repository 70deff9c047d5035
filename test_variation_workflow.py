"""Tests for the prompt variation workflow and generation batches (image.services)."""
import asyncio

import pytest

from common.error_messages import ErrorCode
from common.errors import GatewayError, ValidationError
from common.models import GeneratedImage, PromptSet
from gateway import services as gateway_services
from image import services as image_services


class GatewayStub:
    """Records calls and answers from canned values or exceptions."""

    def __init__(self, variations=None, improved=None, failing_prompts=()):
        self.variations = variations
        self.improved = improved
        self.failing_prompts = set(failing_prompts)
        self.calls = []

    async def get_prompt_variations(self, base_prompt):
        self.calls.append(("variations", base_prompt))
        if isinstance(self.variations, Exception):
            raise self.variations
        return PromptSet.from_items(self.variations)

    async def improve_prompt(self, prompt):
        self.calls.append(("improve", prompt))
        if isinstance(self.improved, Exception):
            raise self.improved
        return self.improved

    async def generate_image(self, prompt):
        self.calls.append(("image", prompt))
        await asyncio.sleep(0)
        if prompt in self.failing_prompts:
            raise GatewayError(ErrorCode.IMAGE_GENERATION_FAILED, f"boom for {prompt}")
        return GeneratedImage(prompt=prompt, mime_type="image/jpeg", data="aW1n")


@pytest.fixture
def install(monkeypatch):
    def _install(stub):
        monkeypatch.setattr(gateway_services, "get_prompt_variations", stub.get_prompt_variations)
        monkeypatch.setattr(gateway_services, "improve_prompt", stub.improve_prompt)
        monkeypatch.setattr(gateway_services, "generate_image", stub.generate_image)
        return stub
    return _install


def test_structured_variations_are_used_in_order(install):
    stub = install(GatewayStub(variations=["a cat in space", "a cat, watercolor", "a cat, noir"]))

    prompt_set = asyncio.run(image_services.build_prompt_set("a cat"))

    assert prompt_set.as_list() == ["a cat in space", "a cat, watercolor", "a cat, noir"]
    assert stub.calls == [("variations", "a cat")]


def test_short_variation_list_is_not_padded(install):
    install(GatewayStub(variations=["a cat in space", "a cat, watercolor"]))

    prompt_set = asyncio.run(image_services.build_prompt_set("a cat"))

    assert prompt_set.as_list() == ["a cat in space", "a cat, watercolor"]


def test_fallback_when_structured_call_throws(install):
    stub = install(GatewayStub(
        variations=GatewayError(ErrorCode.VARIATIONS_FAILED, "malformed JSON"),
        improved="a happy dog in a park",
    ))

    prompt_set = asyncio.run(image_services.build_prompt_set("a dog"))

    assert prompt_set.as_list() == [
        "a happy dog in a park",
        "a happy dog in a park, cinematic lighting",
        "a happy dog in a park, in the style of vaporwave",
    ]
    assert stub.calls == [("variations", "a dog"), ("improve", "a dog")]


def test_fallback_absorbs_unexpected_errors(install):
    install(GatewayStub(variations=RuntimeError("network down"), improved="better"))

    prompt_set = asyncio.run(image_services.build_prompt_set("base"))

    assert len(prompt_set.prompts) == 3
    assert prompt_set.prompts[0] == "better"


def test_fallback_failure_propagates_gateway_error(install):
    install(GatewayStub(
        variations=GatewayError(ErrorCode.VARIATIONS_FAILED, "empty array"),
        improved=GatewayError(ErrorCode.IMPROVE_FAILED, "quota exceeded"),
    ))

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(image_services.build_prompt_set("base"))

    assert exc_info.value.code == ErrorCode.IMPROVE_FAILED


def test_batch_pairs_images_with_prompts(install):
    stub = install(GatewayStub())
    prompt_set = PromptSet(prompts=("one", "two", "three"))

    images = asyncio.run(image_services.generate_batch(prompt_set))

    assert [image.prompt for image in images] == ["one", "two", "three"]
    assert sorted(p for kind, p in stub.calls if kind == "image") == ["one", "three", "two"]


def test_batch_is_all_or_nothing(install):
    install(GatewayStub(failing_prompts={"two"}))
    prompt_set = PromptSet(prompts=("one", "two", "three"))

    with pytest.raises(GatewayError) as exc_info:
        asyncio.run(image_services.generate_batch(prompt_set))

    assert exc_info.value.code == ErrorCode.IMAGE_GENERATION_FAILED


def test_prompt_set_rejects_empty_and_non_strings():
    with pytest.raises(ValueError):
        PromptSet.from_items([])
    with pytest.raises(ValueError):
        PromptSet.from_items(["ok", None])
    with pytest.raises(ValueError):
        PromptSet.from_items("a string is not a list")


def test_upload_rejects_non_image_types():
    with pytest.raises(ValidationError) as exc_info:
        image_services.validate_image_upload("notes.pdf", "application/pdf", b"%PDF-1.7")

    assert exc_info.value.code == ErrorCode.INVALID_IMAGE_FILE
    assert exc_info.value.message == "Please upload a valid image file (PNG, JPG, etc.)."


def test_upload_rejects_empty_and_oversized_files(monkeypatch):
    with pytest.raises(ValidationError) as exc_info:
        image_services.validate_image_upload("empty.png", "image/png", b"")
    assert exc_info.value.code == ErrorCode.EMPTY_IMAGE_FILE

    monkeypatch.setattr(image_services.Config, "MAX_UPLOAD_BYTES", 4)
    with pytest.raises(ValidationError) as exc_info:
        image_services.validate_image_upload("big.png", "image/png", b"12345")
    assert exc_info.value.code == ErrorCode.IMAGE_TOO_LARGE


def test_upload_accepts_images():
    source = image_services.validate_image_upload("cat.png", "image/png", b"\x89PNG")

    assert source.filename == "cat.png"
    assert source.mime_type == "image/png"
    assert source.data == "iVBORw=="


@pytest.mark.parametrize("prompt, expected", [
    ("A Cat, in Space!", "acatinspace.jpeg"),
    ("A photorealistic image of a majestic lion", "aphotorealisticimageofama.jpeg"),
    ("!!! ???", "edited-image.jpeg"),
    ("", "edited-image.jpeg"),
])
def test_download_filename(prompt, expected):
    assert image_services.download_filename(prompt) == expected
