"""
AI Services Module for Resume Studio
Handles the three AI operations: resume parsing, JD match analysis and
bullet-point rewriting. The selected provider decides the call shape:
"gemini" goes through the google-genai SDK with a structured-output schema,
every other provider gets an OpenAI-compatible /chat/completions request.
"""
import json
import logging
import re
import textwrap
from dataclasses import dataclass
from typing import Any, List, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .config import AI_TIMEOUT, DEFAULT_GEMINI_MODEL, DEFAULT_PROVIDER, env_api_key
from .schemas import AISettings, OptimizationResult, ParsedResume, ResumeProfile

logger = logging.getLogger(__name__)


# ----- Errors -----

class AIServiceError(Exception):
    """Base for errors surfaced to the user at the HTTP boundary."""
    status_code = 502
    requires_settings = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingAPIKeyError(AIServiceError):
    status_code = 401
    requires_settings = True

    def __init__(self, message: str = "API Key is missing. Please configure it in the Settings menu."):
        super().__init__(message)


class InvalidAPIKeyError(AIServiceError):
    status_code = 401
    requires_settings = True

    def __init__(self, message: str = "Invalid API Key or Permissions. Please check your Settings."):
        super().__init__(message)


class UnsupportedDocumentError(AIServiceError):
    status_code = 415


class AIProviderError(AIServiceError):
    pass


class AIResponseError(AIServiceError):
    pass


UNSUPPORTED_MIME_MESSAGE = (
    "The AI model does not support this file format. "
    "Please try uploading a PDF or copy/paste the text."
)


def classify_provider_error(status: Optional[int], message: str) -> AIServiceError:
    """Map a provider failure onto the user-facing error it should produce."""
    if "Unsupported MIME type" in message:
        return UnsupportedDocumentError(UNSUPPORTED_MIME_MESSAGE)
    if status in (401, 403) or "API_KEY_INVALID" in message:
        return InvalidAPIKeyError()
    if "INVALID_ARGUMENT" in message:
        return AIProviderError(f"AI Request Error: {message}")
    return AIProviderError(message or f"API Error ({status})")


# ----- Schemas -----

@dataclass
class ResumeDocument:
    """Raw uploaded document handed to a provider that can read it natively."""
    data: bytes
    mime_type: str
    filename: str = ""


# Shapes described to OpenAI-compatible models in the system prompt
RESUME_SCHEMA_PROPS = {
    "name": "string",
    "title": "string (Current or target job title)",
    "email": "string",
    "phone": "string",
    "location": "string",
    "summary": "string",
    "skills": ["string"],
    "experience": [{
        "company": "string",
        "role": "string",
        "startDate": "string",
        "endDate": "string",
        "current": "boolean",
        "description": "string (Bullet points or description of the role)",
    }],
    "education": [{
        "institution": "string",
        "degree": "string",
        "startDate": "string",
        "endDate": "string",
    }],
}

OPTIMIZATION_SCHEMA_PROPS = {
    "score": "integer (0-100)",
    "missingKeywords": ["string"],
    "vaguePoints": [{
        "experienceId": "string (The specific section or experience context)",
        "suggestion": "string (Detailed actionable advice. Provide 5-10 items focusing on quantification and impact)",
    }],
    "summarySuggestion": "string",
    "matchAnalysis": "string",
}


def _str() -> types.Schema:
    return types.Schema(type=types.Type.STRING)


def _obj(**props: types.Schema) -> types.Schema:
    return types.Schema(type=types.Type.OBJECT, properties=props)


def _arr(items: types.Schema) -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=items)


# Structured-output schemas for Gemini
GEMINI_RESUME_SCHEMA = _obj(
    name=_str(),
    title=_str(),
    email=_str(),
    phone=_str(),
    location=_str(),
    summary=_str(),
    skills=_arr(_str()),
    experience=_arr(_obj(
        company=_str(),
        role=_str(),
        startDate=_str(),
        endDate=_str(),
        current=types.Schema(type=types.Type.BOOLEAN),
        description=_str(),
    )),
    education=_arr(_obj(
        institution=_str(),
        degree=_str(),
        startDate=_str(),
        endDate=_str(),
    )),
)

GEMINI_OPTIMIZATION_SCHEMA = _obj(
    score=types.Schema(type=types.Type.INTEGER),
    missingKeywords=_arr(_str()),
    vaguePoints=_arr(_obj(experienceId=_str(), suggestion=_str())),
    summarySuggestion=_str(),
    matchAnalysis=_str(),
)

GEMINI_VARIATIONS_SCHEMA = _arr(_str())


# ----- JSON helpers -----

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")
_JSON_FINDER = re.compile(r"\{.*\}", re.S)
_ARRAY_FINDER = re.compile(r"\[.*\]", re.S)


def _strip_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw.strip())


def _extract_json(raw: str) -> Any:
    text = _strip_fences(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        if m := _JSON_FINDER.search(text):
            try:
                return json.loads(m.group())
            except json.JSONDecodeError:
                pass
        raise AIResponseError("AI returned a response that is not valid JSON.")


def _validate(model: type[BaseModel], raw: str) -> Any:
    try:
        return model.model_validate(_extract_json(raw))
    except ValidationError as e:
        logger.error(f"Unexpected AI response shape: {e}")
        raise AIResponseError("AI returned data in an unexpected format.") from e


class AIService:
    """Dispatches the resume AI operations to the configured provider."""

    def __init__(self, settings: AISettings):
        self.provider = settings.provider or DEFAULT_PROVIDER
        self.api_key = settings.api_key
        self.base_url = (settings.base_url or "").rstrip("/")
        if self.uses_gemini:
            self.model = settings.model or DEFAULT_GEMINI_MODEL
        else:
            self.model = settings.model

    @property
    def uses_gemini(self) -> bool:
        return self.provider == "gemini"

    # ----- Operations -----

    async def parse_resume(self, source: Union[str, ResumeDocument]) -> ParsedResume:
        """Extract a structured resume from pasted text or an uploaded document."""
        try:
            if self.uses_gemini:
                if isinstance(source, str):
                    contents: Any = (
                        "Extract resume information from the following text and "
                        f'format it into JSON. Text: "{source}"'
                    )
                else:
                    contents = [
                        types.Part.from_bytes(data=source.data, mime_type=source.mime_type),
                        "Extract resume information from this document and format it into JSON.",
                    ]
                text = await self._gemini_generate(contents, GEMINI_RESUME_SCHEMA)
                if not text:
                    raise AIResponseError("AI returned empty response.")
                return _validate(ParsedResume, text)

            if not isinstance(source, str):
                raise UnsupportedDocumentError(
                    "For non-Gemini models, please copy and paste the text directly, "
                    "as document parsing varies by provider."
                )
            system_prompt = textwrap.dedent(f"""
                You are a resume parsing assistant.
                Extract resume information and return strictly valid JSON.
                Follow this structure:
                {json.dumps(RESUME_SCHEMA_PROPS, indent=2)}
            """)
            result = await self._openai_fetch([
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": f"Resume Content:\n{source}"},
            ])
            return _validate(ParsedResume, result)
        except AIServiceError as e:
            logger.error(f"AI Service Error: {e.message}")
            raise

    async def analyze_resume(self, resume: ResumeProfile, jd: str) -> OptimizationResult:
        """Score a resume against a job description and suggest improvements."""
        resume_text = json.dumps(resume.model_dump(by_alias=True))
        try:
            if self.uses_gemini:
                prompt = textwrap.dedent(f"""
                    Act as a senior hiring manager. Analyze the Resume against the JD.
                    Resume: {resume_text}
                    Job Description: {jd}
                    IMPORTANT: Respond in the SAME LANGUAGE as the Job Description.

                    Provide:
                    1. A match score (0-100).
                    2. Missing keywords (skills/tools found in JD but not in Resume).
                    3. A detailed analysis of the match.
                    4. A suggested professional summary tailored to the JD.
                    5. Improvement Tips (vaguePoints): Provide 5 to 10 specific, actionable suggestions. Focus on quantifying results (STAR method), clarifying vague statements, and tailoring content to the JD.
                """)
                text = await self._gemini_generate(prompt, GEMINI_OPTIMIZATION_SCHEMA)
                if not text:
                    raise AIResponseError("AI returned empty analysis.")
                return _validate(OptimizationResult, text)

            system_prompt = textwrap.dedent(f"""
                You are a hiring manager ATS expert. Analyze the resume vs JD.
                Return valid JSON matching this structure:
                {json.dumps(OPTIMIZATION_SCHEMA_PROPS, indent=2)}

                CRITICAL:
                1. Analyze and respond in the SAME LANGUAGE as the provided Job Description.
                2. For 'vaguePoints', provide between 5 and 10 specific, actionable improvement tips.
            """)
            result = await self._openai_fetch([
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": f"Resume: {resume_text}\n\nJob Description: {jd}"},
            ])
            return _validate(OptimizationResult, result)
        except AIServiceError as e:
            logger.error(f"AI Service Error: {e.message}")
            raise

    async def rewrite_bullet_point(self, bullet: str, jd: Optional[str] = None) -> List[str]:
        """Return up to three rewrites: conservative, quantitative, achievement."""
        context = f"Context JD: {jd[:300]}..." if jd else ""
        user_prompt = textwrap.dedent(f"""
            Rewrite this resume bullet to be impactful, quantified (STAR method).
            {context}
            Original: "{bullet}"
            Detect language and respond in the SAME language.
            Return a JSON Array of 3 strings (Conservative, Quantitative, Achievement).
        """)
        try:
            if self.uses_gemini:
                text = await self._gemini_generate(user_prompt, GEMINI_VARIATIONS_SCHEMA)
                if not text:
                    return []
                parsed = json.loads(_strip_fences(text))
                variations = parsed if isinstance(parsed, list) else [text]
            else:
                result = await self._openai_fetch([
                    {
                        "role": "system",
                        "content": 'You are a professional resume writer. Return ONLY a JSON array of strings. Example: ["Variation 1", "Variation 2", "Variation 3"]',
                    },
                    {"role": "user", "content": user_prompt},
                ])
                variations = self._variations_from_text(result, bullet)
        except AIServiceError as e:
            logger.error(f"AI Service Error: {e.message}")
            raise
        except json.JSONDecodeError:
            variations = [bullet]
        return [str(v) for v in variations][:3]

    @staticmethod
    def _variations_from_text(result: str, bullet: str) -> List[Any]:
        # Chat models wrap the array in all sorts of ways under JSON mode
        try:
            parsed = json.loads(_strip_fences(result))
            if isinstance(parsed, list):
                return parsed
            if isinstance(parsed, dict) and isinstance(parsed.get("variations"), list):
                return parsed["variations"]
            match = _ARRAY_FINDER.search(result)
            if match:
                return json.loads(match.group())
            return [result]
        except json.JSONDecodeError:
            return [bullet]

    # ----- Transports -----

    async def _gemini_generate(self, contents: Any, schema: types.Schema) -> str:
        """Structured-output call through the google-genai SDK."""
        key = self.api_key or env_api_key()
        if not key:
            raise MissingAPIKeyError()
        client = genai.Client(api_key=key)
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
        except genai_errors.APIError as e:
            # Gemini reports a bad key as INVALID_ARGUMENT; the reason is only in details
            if "API_KEY_INVALID" in str(e.details):
                raise InvalidAPIKeyError() from e
            raise classify_provider_error(e.code, f"{e.status or ''} {e.message or ''}".strip()) from e
        finally:
            await client.aio.aclose()
        return response.text or ""

    async def _openai_fetch(self, messages: List[dict], json_mode: bool = True) -> str:
        """POST to an OpenAI-compatible /chat/completions endpoint."""
        if not self.api_key:
            raise MissingAPIKeyError()

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.7,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=AI_TIMEOUT) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"OpenAI Fetch Error: {e}")
            raise AIProviderError("Failed to connect to AI provider.") from e

        if response.status_code != 200:
            err_text = response.text
            try:
                err_msg = response.json()["error"]["message"] or err_text
            except (ValueError, KeyError, TypeError):
                err_msg = err_text
            raise classify_provider_error(response.status_code, err_msg)

        try:
            result = response.json()
            return result["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIResponseError("AI provider returned an unexpected response.") from e


# Utility function to get AI service instances
def get_ai_service(settings: AISettings) -> AIService:
    """Build the AI service for the user's current settings"""
    return AIService(settings)
