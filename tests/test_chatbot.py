import io

import pytest
import requests

from ddm_jewellers.services import assistant


class FakeResponse:
    def __init__(self, payload=None, content=b"", status=200):
        self.payload = payload
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


@pytest.fixture
def openai(app, monkeypatch):
    """Configure an API key and capture every outgoing request."""
    app.config["OPENAI_API_KEY"] = "sk-test"
    calls = []
    replies = []

    def fake_post(url, headers=None, timeout=None, **kwargs):
        calls.append({"url": url, "headers": headers, **kwargs})
        return replies.pop(0)

    monkeypatch.setattr(assistant.requests, "post", fake_post)
    return calls, replies


def _chat_reply(text):
    return FakeResponse({"choices": [{"message": {"content": text}}]})


def test_chat_without_key_is_unavailable(client, customer_headers):
    resp = client.post("/api/chatbot/chat", json={"message": "Namaste"}, headers=customer_headers)
    assert resp.status_code == 503
    assert resp.get_json()["message"] == "AI assistant is not configured"


def test_chat_uses_persona_and_remembers_profile(client, customer, customer_headers, openai):
    calls, replies = openai
    client.post("/api/chatbot/memory", json={"age": 28, "preferences": {"favoriteMetals": ["gold", "rose gold"]}},
                headers=customer_headers)
    replies.append(_chat_reply("Beta, a polki choker would be lovely."))

    resp = client.post("/api/chatbot/chat", json={
        "message": "What should I wear to a sangeet?",
        "user_profile": {"lifestyle": "Working professional", "preferences": {"budgetRange": "50k-1L"}},
    }, headers=customer_headers)
    assert resp.status_code == 200
    assert resp.get_json()["response"] == "Beta, a polki choker would be lovely."

    request = calls[0]
    assert request["url"].endswith("/chat/completions")
    assert request["headers"]["Authorization"] == "Bearer sk-test"
    system = request["json"]["messages"][0]["content"]
    assert "Sunaarji" in system
    assert "28 years old" in system
    assert "gold, rose gold" in system

    memory = client.get("/api/chatbot/memory", headers=customer_headers).get_json()
    assert memory["lifestyle"] == "Working professional"
    assert memory["preferences"] == {"favoriteMetals": ["gold", "rose gold"], "budgetRange": "50k-1L"}


def test_chat_requires_message(client, customer_headers, openai):
    assert client.post("/api/chatbot/chat", json={"message": "  "}, headers=customer_headers).status_code == 400


def test_upstream_failure_is_bad_gateway(client, customer_headers, openai):
    _, replies = openai
    replies.append(FakeResponse(status=500))
    resp = client.post("/api/chatbot/chat", json={"message": "Hello"}, headers=customer_headers)
    assert resp.status_code == 502

    replies.append(FakeResponse({"choices": []}))
    resp = client.post("/api/chatbot/chat", json={"message": "Hello"}, headers=customer_headers)
    assert resp.status_code == 502


def test_memory_starts_empty(client, customer_headers):
    assert client.get("/api/chatbot/memory", headers=customer_headers).get_json() is None


def test_save_conversation(client, customer, customer_headers):
    messages = [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Namaste ji"}]
    resp = client.post("/api/chatbot/conversation", json={"session_id": "abc", "messages": messages},
                       headers=customer_headers)
    assert resp.status_code == 201
    assert resp.get_json()["messages"] == messages
    assert client.post("/api/chatbot/conversation", json={"session_id": "abc"},
                       headers=customer_headers).status_code == 400


def test_text_to_speech(client, customer_headers, openai):
    calls, replies = openai
    replies.append(FakeResponse(content=b"ID3-audio"))
    resp = client.post("/api/chatbot/text-to-speech", json={"text": "Namaste"}, headers=customer_headers)
    assert resp.status_code == 200
    assert resp.mimetype == "audio/mpeg"
    assert resp.data == b"ID3-audio"
    assert calls[0]["json"] == {"model": "tts-1", "voice": "nova", "input": "Namaste"}


def test_speech_to_text(client, customer_headers, openai):
    calls, replies = openai
    replies.append(FakeResponse({"text": "sone ka haar"}))
    resp = client.post("/api/chatbot/speech-to-text", data={"audio": (io.BytesIO(b"RIFF"), "clip.wav")},
                       headers=customer_headers, content_type="multipart/form-data")
    assert resp.get_json() == {"text": "sone ka haar"}
    assert calls[0]["data"] == {"model": "whisper-1"}

    resp = client.post("/api/chatbot/speech-to-text", data={"audio": (io.BytesIO(b"x"), "clip.txt")},
                       headers=customer_headers, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_speech_to_text_size_limit(app, client, customer_headers, openai):
    app.config["MAX_AUDIO_BYTES"] = 4
    resp = client.post("/api/chatbot/speech-to-text", data={"audio": (io.BytesIO(b"too long"), "clip.wav")},
                       headers=customer_headers, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_shingaar_guru_canned_advice(client, catalog):
    resp = client.post("/api/shingaar-guru/recommendations", json={
        "occasion": "Wedding", "budget": [50000, 100000], "metal_preference": "gold",
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["advice_source"] == "canned"
    assert data["advice"] == assistant.CANNED_ADVICE["wedding"]
    assert [p["name"] for p in data["products"]] == ["Gold Chain"]


def test_shingaar_guru_budget_filter(client, catalog, monkeypatch):
    monkeypatch.setattr(assistant, "complete", lambda *args, **kwargs: "Try kundan with a silk saree.")
    data = client.post("/api/shingaar-guru/recommendations", json={"budget": [1000, 2000]}).get_json()
    assert data["advice_source"] == "assistant"
    assert data["advice"] == "Try kundan with a silk saree."
    assert [p["name"] for p in data["products"]] == ["Kundan Set"]

    assert client.post("/api/shingaar-guru/recommendations", json={"budget": [5000, 10]}).status_code == 400
    assert client.post("/api/shingaar-guru/recommendations", json={"budget": 500}).status_code == 400


def test_tryon_requires_known_product(client, customer_headers):
    resp = client.post("/api/ai-tryon/upload", data={"product_id": "77", "photo": (io.BytesIO(b"img"), "me.jpg")},
                       headers=customer_headers, content_type="multipart/form-data")
    assert resp.status_code == 404


def test_custom_jewelry_upload(client, customer_headers, monkeypatch, app):
    app.config["CLOUDINARY_CLOUD_NAME"] = "demo"
    uploads = []

    def fake_upload(file, folder=None, resource_type=None):
        uploads.append((file.filename, folder, resource_type))
        return {"secure_url": "https://res.cloudinary.com/demo/sketch.pdf"}

    monkeypatch.setattr("cloudinary.uploader.upload", fake_upload)
    resp = client.post("/api/custom-jewelry/upload",
                       data={"design": (io.BytesIO(b"%PDF"), "sketch.pdf"), "description": "Peacock pendant"},
                       headers=customer_headers, content_type="multipart/form-data")
    assert resp.status_code == 201
    assert resp.get_json()["design_url"] == "https://res.cloudinary.com/demo/sketch.pdf"
    assert uploads == [("sketch.pdf", "ddm/custom-designs", "auto")]
