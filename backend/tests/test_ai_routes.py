import io

from resume_studio.api import routes_ai
from resume_studio.ai_services import AIService, MissingAPIKeyError
from resume_studio.schemas import OptimizationResult, ParsedResume


class FakeAIService:
    uses_gemini = False

    async def parse_resume(self, source):
        return ParsedResume(name="Alice", skills=["Python"])

    async def analyze_resume(self, resume, jd):
        return OptimizationResult(score=90, summary_suggestion=f"{resume.name} for {jd}")

    async def rewrite_bullet_point(self, bullet, jd=None):
        return [bullet.upper(), bullet.lower(), bullet.title()]


class NoKeyService(FakeAIService):
    async def analyze_resume(self, resume, jd):
        raise MissingAPIKeyError()


def test_parse_text(client, monkeypatch):
    monkeypatch.setattr(routes_ai, "get_ai_service", lambda settings: FakeAIService())
    r = client.post("/ai/parse", json={"text": "Alice, Python dev"})
    assert r.status_code == 200
    assert r.json()["name"] == "Alice"
    assert r.json()["skills"] == ["Python"]


def test_parse_text_blank(client):
    assert client.post("/ai/parse", json={"text": "  "}).status_code == 400


def test_parse_file_docx_goes_through_text(client, monkeypatch):
    from docx import Document

    seen = []

    class Recording(FakeAIService):
        async def parse_resume(self, source):
            seen.append(source)
            return ParsedResume(name="From Docx")

    monkeypatch.setattr(routes_ai, "get_ai_service", lambda settings: Recording())
    doc = Document()
    doc.add_paragraph("Alice Example")
    buf = io.BytesIO()
    doc.save(buf)
    files = {"file": ("cv.docx", io.BytesIO(buf.getvalue()), "application/octet-stream")}

    r = client.post("/ai/parse-file", files=files)
    assert r.status_code == 200
    assert r.json()["name"] == "From Docx"
    assert seen == ["Alice Example"]


def test_analyze_inline_resume(client, monkeypatch):
    monkeypatch.setattr(routes_ai, "get_ai_service", lambda settings: FakeAIService())
    body = {"resume": {"id": "tmp", "name": "Alice"}, "jobDescription": "Platform role"}
    r = client.post("/ai/analyze", json=body)
    assert r.status_code == 200
    assert r.json()["score"] == 90
    assert r.json()["summarySuggestion"] == "Alice for Platform role"


def test_rewrite_bullet(client, monkeypatch):
    monkeypatch.setattr(routes_ai, "get_ai_service", lambda settings: FakeAIService())
    r = client.post("/ai/rewrite-bullet", json={"bullet": "Built APIs"})
    assert r.json() == {"variations": ["BUILT APIS", "built apis", "Built Apis"]}
    assert client.post("/ai/rewrite-bullet", json={"bullet": ""}).status_code == 400


def test_missing_key_asks_client_to_open_settings(client, monkeypatch):
    monkeypatch.setattr(routes_ai, "get_ai_service", lambda settings: NoKeyService())
    r = client.post("/ai/analyze", json={"resume": {"id": "tmp"}, "jobDescription": "JD"})
    assert r.status_code == 401
    assert r.json() == {
        "detail": "API Key is missing. Please configure it in the Settings menu.",
        "openSettings": True,
    }


def test_real_service_with_default_settings_requires_key(client):
    # Default settings select Gemini with no stored key and no API_KEY env
    r = client.post("/ai/rewrite-bullet", json={"bullet": "Built APIs"})
    assert r.status_code == 401
    assert r.json()["openSettings"] is True


def test_settings_drive_the_rest_path(client, monkeypatch):
    seen = {}

    def factory(settings):
        seen["settings"] = settings
        return FakeAIService()

    monkeypatch.setattr(routes_ai, "get_ai_service", factory)
    client.put("/settings", json={"provider": "qwen", "apiKey": "k", "baseUrl": "", "model": ""})
    client.post("/ai/rewrite-bullet", json={"bullet": "x"})
    service = AIService(seen["settings"])
    assert not service.uses_gemini
    assert service.base_url == "https://dashscope.aliyuncs.com/compatible-mode/v1"
    assert service.model == "qwen-plus"
    assert service.api_key == "k"
