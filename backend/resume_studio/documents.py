"""
Resume import: turn pasted text or an uploaded file into profile fields.

DOCX text is extracted locally so it works with every provider. PDFs and
images are only readable by Gemini, which receives the raw bytes inline.
"""
import io
import logging
import mimetypes
import uuid
from typing import Optional, Union

from docx import Document

from .ai_services import AIService, ResumeDocument, UnsupportedDocumentError
from .schemas import Education, ParsedResume, ResumeProfile, WorkExperience

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
mimetypes.add_type(DOCX_MIME, ".docx")


def guess_mime_type(filename: str, content_type: Optional[str]) -> str:
    if content_type and content_type != "application/octet-stream":
        return content_type
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or "application/octet-stream"


def extract_docx_text(data: bytes) -> Optional[str]:
    """Plain text of a .docx file, or None when it can't be read."""
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        logger.warning(f"Failed to extract DOCX text locally: {e}")
        return None
    text = "\n".join(p.text for p in doc.paragraphs).strip()
    return text or None


def extract_local_text(document: ResumeDocument) -> Optional[str]:
    if document.mime_type == DOCX_MIME or document.filename.lower().endswith(".docx"):
        return extract_docx_text(document.data)
    if document.mime_type.startswith("text/"):
        return document.data.decode("utf-8", errors="ignore").strip() or None
    return None


async def import_resume(service: AIService, source: Union[str, ResumeDocument]) -> ParsedResume:
    """Pick the input each provider can handle and parse it."""
    if isinstance(source, str):
        return await service.parse_resume(source)

    text = extract_local_text(source)
    if text:
        return await service.parse_resume(text)
    if service.uses_gemini:
        return await service.parse_resume(source)

    if "pdf" in source.mime_type:
        raise UnsupportedDocumentError(
            "This AI provider does not support PDF uploads. "
            "Please switch to Gemini or copy/paste the text."
        )
    if "image" in source.mime_type:
        raise UnsupportedDocumentError(
            "This AI provider does not support Image uploads. Please switch to Gemini."
        )
    raise UnsupportedDocumentError(
        "Unable to read file content. Please copy/paste your resume content."
    )


def apply_parsed_resume(resume: ResumeProfile, parsed: ParsedResume) -> ResumeProfile:
    """Merge parsed fields into a profile; imported entries get fresh ids."""
    updates = {
        k: v for k, v in parsed.model_dump(include={"name", "title", "email", "phone", "location", "summary"}).items()
        if v is not None
    }
    updates["skills"] = parsed.skills or []
    updates["experience"] = [
        WorkExperience(
            id=str(uuid.uuid4()),
            company=e.company or "",
            role=e.role or "",
            start_date=e.start_date or "",
            end_date=e.end_date or "",
            current=bool(e.current),
            description=e.description or "",
        )
        for e in parsed.experience or []
    ]
    updates["education"] = [
        Education(
            id=str(uuid.uuid4()),
            institution=e.institution or "",
            degree=e.degree or "",
            start_date=e.start_date or "",
            end_date=e.end_date or "",
        )
        for e in parsed.education or []
    ]
    return resume.model_copy(update=updates)
