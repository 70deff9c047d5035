"""HTTP tests for the studio API, driven through a fake Gemini client."""
import pytest
from fastapi.testclient import TestClient

from app import app, mask_sensitive_data


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def session_id(client):
    response = client.post("/api/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_and_read_session(client, session_id):
    response = client.get(f"/api/sessions/{session_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["session_id"] == session_id
    assert body["prompt"].startswith("A photorealistic image of a majestic lion")
    assert body["actions"]["generate"]["status"] == "idle"


def test_unknown_session_is_404(client):
    response = client.get("/api/sessions/does-not-exist")

    assert response.status_code == 404
    assert response.json()["code"] == "SESSION_NOT_FOUND"


def test_delete_session(client, session_id):
    assert client.delete(f"/api/sessions/{session_id}").json() == {"deleted": True, "session_id": session_id}
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_generate_with_structured_variations(client, session_id, fake_client, responses):
    fake_client.models.content_responses.append(
        responses.text('["a cat in space", "a cat, watercolor", "a cat, noir"]')
    )
    fake_client.models.image_responses.extend([responses.imagen(b"1"), responses.imagen(b"2"), responses.imagen(b"3")])

    response = client.post(f"/api/sessions/{session_id}/generate", json={"prompt": "a cat"})

    assert response.status_code == 200
    body = response.json()
    assert body["prompt_set"] == ["a cat in space", "a cat, watercolor", "a cat, noir"]
    assert [image["prompt"] for image in body["images"]] == body["prompt_set"]
    assert body["actions"]["generate"]["status"] == "succeeded"


def test_generate_falls_back_when_variations_are_malformed(client, session_id, fake_client, responses):
    fake_client.models.content_responses.extend([
        responses.text("Sure! Here are some prompts: one, two, three"),
        responses.text("a happy dog in a park"),
    ])
    fake_client.models.image_responses.extend([responses.imagen(b"1"), responses.imagen(b"2"), responses.imagen(b"3")])

    response = client.post(f"/api/sessions/{session_id}/generate", json={"prompt": "a dog"})

    assert response.status_code == 200
    assert response.json()["prompt_set"] == [
        "a happy dog in a park",
        "a happy dog in a park, cinematic lighting",
        "a happy dog in a park, in the style of vaporwave",
    ]


def test_generate_failure_returns_generic_message(client, session_id, fake_client, responses):
    fake_client.models.content_responses.append(responses.text('["one", "two", "three"]'))
    fake_client.models.image_responses.extend([
        responses.imagen(b"1"),
        RuntimeError("upstream exploded with stack trace"),
        responses.imagen(b"3"),
    ])

    response = client.post(f"/api/sessions/{session_id}/generate", json={})

    assert response.status_code == 502
    assert response.json() == {
        "detail": "Failed to generate an image. Please try again.",
        "code": "IMAGE_GENERATION_FAILED",
    }
    session = client.get(f"/api/sessions/{session_id}").json()
    assert session["images"] == []
    assert session["actions"]["generate"]["status"] == "failed"


def test_improve_updates_prompt(client, session_id, fake_client, responses):
    fake_client.models.content_responses.append(responses.text("a sleek red fox at dawn"))

    response = client.post(f"/api/sessions/{session_id}/improve", json={"prompt": "fox"})

    assert response.status_code == 200
    assert response.json()["prompt"] == "a sleek red fox at dawn"


def test_improve_empty_prompt_is_400(client, session_id, fake_client):
    response = client.post(f"/api/sessions/{session_id}/improve", json={"prompt": ""})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a prompt to improve."
    assert fake_client.models.calls == []


def test_upload_non_image_is_rejected_without_gateway_call(client, session_id, fake_client):
    response = client.post(
        f"/api/sessions/{session_id}/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_IMAGE_FILE"
    assert fake_client.models.calls == []


def test_upload_edit_and_download(client, session_id, fake_client, responses):
    upload = client.post(
        f"/api/sessions/{session_id}/upload",
        files={"file": ("cat.png", b"\x89PNG-source", "image/png")},
    )
    assert upload.status_code == 200
    assert upload.json()["source_image"]["mime_type"] == "image/png"

    fake_client.models.content_responses.append(responses.inline_image(b"edited-bytes", "image/png"))
    edit = client.post(f"/api/sessions/{session_id}/edit", json={"prompt": "Add a party hat!"})
    assert edit.status_code == 200
    assert edit.json()["edited_image"]["download_name"] == "addapartyhat.jpeg"

    download = client.get(f"/api/sessions/{session_id}/edited/download")
    assert download.status_code == 200
    assert download.content == b"edited-bytes"
    assert download.headers["content-disposition"] == 'attachment; filename="addapartyhat.jpeg"'


def test_edit_without_upload_is_400(client, session_id, fake_client):
    response = client.post(f"/api/sessions/{session_id}/edit", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please upload an image first."
    assert fake_client.models.calls == []


def test_download_missing_image_is_404(client, session_id):
    response = client.get(f"/api/sessions/{session_id}/images/0/download")

    assert response.status_code == 404
    assert response.json()["code"] == "IMAGE_NOT_FOUND"


def test_chat_round_trip_and_rollback(client, session_id, fake_client, responses):
    fake_client.models.content_responses.extend([
        responses.text("Hello! What shall we draw?"),
        responses.text("Maybe a lighthouse."),
        ConnectionError("connection reset"),
    ])

    assert client.post(f"/api/sessions/{session_id}/chat", json={"message": "Hi"}).status_code == 200
    assert client.post(f"/api/sessions/{session_id}/chat", json={"message": "Ideas?"}).status_code == 200

    failed = client.post(f"/api/sessions/{session_id}/chat", json={"message": "More?"})
    assert failed.status_code == 502
    assert failed.json()["detail"] == "Failed to get chat response. Please try again."

    transcript = client.get(f"/api/sessions/{session_id}").json()["transcript"]
    assert [(m["role"], m["text"]) for m in transcript] == [
        ("user", "Hi"),
        ("model", "Hello! What shall we draw?"),
        ("user", "Ideas?"),
        ("model", "Maybe a lighthouse."),
    ]


def test_mask_sensitive_data():
    masked = mask_sensitive_data({"prompt": "a cat", "api_key": "secret-value", "nested": [{"Authorization": "x"}]})

    assert masked == {"prompt": "a cat", "api_key": "***MASKED***", "nested": [{"Authorization": "***MASKED***"}]}
