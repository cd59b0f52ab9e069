import json

from resume_studio import kv


def test_get_default_settings(client):
    r = client.get("/settings")
    assert r.status_code == 200
    assert r.json() == {
        "provider": "gemini",
        "apiKey": "",
        "baseUrl": "",
        "model": "gemini-3-flash-preview",
    }


def test_put_settings_round_trip_and_encrypts_key(client, session_factory):
    body = {"provider": "deepseek", "apiKey": " sk-live ", "baseUrl": "", "model": ""}
    r = client.put("/settings", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["apiKey"] == "sk-live"
    # blank base URL and model take the provider preset
    assert data["baseUrl"] == "https://api.deepseek.com"
    assert data["model"] == "deepseek-chat"

    session = session_factory()
    try:
        stored = json.loads(kv.get_item(session, kv.SETTINGS_KEY))
    finally:
        session.close()
    assert "sk-live" not in json.dumps(stored)

    assert client.get("/settings").json()["apiKey"] == "sk-live"


def test_put_settings_keeps_custom_base_url(client):
    body = {"provider": "openai_custom", "apiKey": "k", "baseUrl": "http://localhost:11434/v1", "model": "llama3"}
    data = client.put("/settings", json=body).json()
    assert data["baseUrl"] == "http://localhost:11434/v1"
    assert data["model"] == "llama3"


def test_put_settings_unknown_provider(client):
    r = client.put("/settings", json={"provider": "skynet", "apiKey": "k"})
    assert r.status_code == 400


def test_list_providers(client):
    data = client.get("/settings/providers").json()
    ids = [p["id"] for p in data]
    assert ids[0] == "gemini"
    assert {"deepseek", "moonshot", "qwen", "minimax", "grok", "openai_custom"} <= set(ids)
    grok = next(p for p in data if p["id"] == "grok")
    assert grok["defaultBaseUrl"] == "https://api.x.ai/v1"
