import json

from resume_studio import kv
from resume_studio import storage
from resume_studio.schemas import AISettings, ResumeProfile, WorkExperience


def _profile(pid="r1", name="Alice", last_modified=0):
    return ResumeProfile(id=pid, name=name, last_modified=last_modified)


def test_get_resumes_empty_store(db_session):
    assert storage.get_resumes(db_session) == []
    assert storage.get_resume_by_id(db_session, "missing") is None


def test_save_new_id_appends(db_session):
    storage.save_resume(db_session, _profile("r1"))
    storage.save_resume(db_session, _profile("r2", name="Bob"))
    assert [r.id for r in storage.get_resumes(db_session)] == ["r1", "r2"]


def test_save_existing_id_replaces_and_updates_timestamp(db_session, monkeypatch):
    monkeypatch.setattr(storage, "now_ms", lambda: 1000)
    storage.save_resume(db_session, _profile("r1"))
    storage.save_resume(db_session, _profile("r2"))

    monkeypatch.setattr(storage, "now_ms", lambda: 2000)
    saved = storage.save_resume(db_session, _profile("r1", name="Alice Updated", last_modified=5))

    resumes = storage.get_resumes(db_session)
    assert [r.id for r in resumes] == ["r1", "r2"]
    assert resumes[0].name == "Alice Updated"
    assert resumes[0].last_modified == 2000 == saved.last_modified
    assert resumes[1].last_modified == 1000


def test_delete_removes_only_matching_id(db_session):
    storage.save_resume(db_session, _profile("r1"))
    storage.save_resume(db_session, _profile("r2"))
    storage.delete_resume(db_session, "r1")
    assert [r.id for r in storage.get_resumes(db_session)] == ["r2"]


def test_delete_missing_id_is_noop(db_session):
    storage.save_resume(db_session, _profile("r1"))
    before = kv.get_item(db_session, kv.PROFILES_KEY)
    storage.delete_resume(db_session, "nope")
    assert kv.get_item(db_session, kv.PROFILES_KEY) == before


def test_profiles_are_stored_with_camel_case_keys(db_session):
    exp = WorkExperience(id="e1", company="Acme", start_date="2020-01", current=True)
    storage.save_resume(db_session, ResumeProfile(id="r1", experience=[exp]))
    raw = json.loads(kv.get_item(db_session, kv.PROFILES_KEY))
    assert "lastModified" in raw[0]
    assert raw[0]["experience"][0]["startDate"] == "2020-01"


def test_create_empty_resume_is_not_persisted(db_session):
    r = storage.create_empty_resume()
    assert r.id and r.skills == [] and r.experience == [] and r.last_modified > 0
    assert storage.get_resumes(db_session) == []


def test_settings_defaults(db_session):
    s = storage.get_ai_settings(db_session)
    assert s.provider == "gemini"
    assert s.api_key == ""
    assert s.model == "gemini-3-flash-preview"


def test_settings_api_key_encrypted_at_rest(db_session):
    storage.save_ai_settings(db_session, AISettings(
        provider="deepseek", api_key="sk-secret", base_url="https://api.deepseek.com", model="deepseek-chat",
    ))
    raw = json.loads(kv.get_item(db_session, kv.SETTINGS_KEY))
    assert raw["apiKey"] != "sk-secret"
    assert set(json.loads(raw["apiKey"])) == {"iv", "data"}

    loaded = storage.get_ai_settings(db_session)
    assert loaded.api_key == "sk-secret"
    assert loaded.provider == "deepseek"
    assert loaded.base_url == "https://api.deepseek.com"


def test_settings_legacy_plaintext_key_is_read(db_session):
    kv.set_item(db_session, kv.SETTINGS_KEY, json.dumps({"provider": "grok", "apiKey": "plain-key"}))
    loaded = storage.get_ai_settings(db_session)
    assert loaded.api_key == "plain-key"
    assert loaded.provider == "grok"
    # missing fields come from the defaults
    assert loaded.model == "gemini-3-flash-preview"


def test_settings_unreadable_record_falls_back_to_defaults(db_session):
    kv.set_item(db_session, kv.SETTINGS_KEY, "{broken")
    assert storage.get_ai_settings(db_session) == AISettings()
