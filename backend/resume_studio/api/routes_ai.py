"""
Stateless AI endpoints: parse resume text/files, score an inline resume
against a JD, rewrite a single bullet. Nothing here is persisted.
"""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session
from ..ai_services import ResumeDocument, get_ai_service
from ..db import get_db
from ..documents import guess_mime_type, import_resume
from ..schemas import (
    InlineAnalyzeRequest, OptimizationResult, ParsedResume, ParseTextRequest,
    RewriteBulletRequest, RewriteResponse,
)
from ..storage import get_ai_settings

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/parse", response_model=ParsedResume)
async def parse_text(body: ParseTextRequest, db: Session = Depends(get_db)):
    if not body.text.strip():
        raise HTTPException(400, "No resume text provided")
    service = get_ai_service(get_ai_settings(db))
    return await import_resume(service, body.text)


@router.post("/parse-file", response_model=ParsedResume)
async def parse_file(file: UploadFile = File(...), db: Session = Depends(get_db)):
    if not file.filename:
        raise HTTPException(400, "No file selected")
    contents = await file.read()
    if not contents:
        raise HTTPException(400, "Uploaded file is empty")
    document = ResumeDocument(
        data=contents,
        mime_type=guess_mime_type(file.filename, file.content_type),
        filename=file.filename,
    )
    service = get_ai_service(get_ai_settings(db))
    return await import_resume(service, document)


@router.post("/analyze", response_model=OptimizationResult)
async def analyze(body: InlineAnalyzeRequest, db: Session = Depends(get_db)):
    if not body.job_description.strip():
        raise HTTPException(400, "No job description provided")
    service = get_ai_service(get_ai_settings(db))
    return await service.analyze_resume(body.resume, body.job_description)


@router.post("/rewrite-bullet", response_model=RewriteResponse)
async def rewrite_bullet(body: RewriteBulletRequest, db: Session = Depends(get_db)):
    if not body.bullet.strip():
        raise HTTPException(400, "No bullet point provided")
    service = get_ai_service(get_ai_settings(db))
    variations = await service.rewrite_bullet_point(body.bullet, body.job_description)
    return RewriteResponse(variations=variations)
