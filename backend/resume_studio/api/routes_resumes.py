from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from ..ai_services import ResumeDocument, get_ai_service
from ..db import get_db
from ..documents import apply_parsed_resume, guess_mime_type, import_resume
from ..preview import render_resume_html, render_resume_pdf
from ..schemas import AnalyzeRequest, OptimizationResult, ResumeProfile, RewriteContext, RewriteResponse
from ..storage import (
    create_empty_resume, delete_resume, get_ai_settings, get_resume_by_id, get_resumes, save_resume,
)

router = APIRouter(prefix="/resumes", tags=["resumes"])


def _resume_or_404(db: Session, resume_id: str) -> ResumeProfile:
    resume = get_resume_by_id(db, resume_id)
    if not resume:
        raise HTTPException(404, "resume not found")
    return resume


@router.get("", response_model=List[ResumeProfile])
def list_resumes(db: Session = Depends(get_db)):
    return get_resumes(db)


@router.post("", response_model=ResumeProfile, status_code=201)
def create_resume(db: Session = Depends(get_db)):
    return save_resume(db, create_empty_resume())


@router.get("/{resume_id}", response_model=ResumeProfile)
def get_resume(resume_id: str, db: Session = Depends(get_db)):
    return _resume_or_404(db, resume_id)


@router.put("/{resume_id}", response_model=ResumeProfile)
def put_resume(resume_id: str, body: ResumeProfile, db: Session = Depends(get_db)):
    """Save the whole profile; the id in the path wins over the body."""
    return save_resume(db, body.model_copy(update={"id": resume_id}))


@router.delete("/{resume_id}", status_code=204)
def remove_resume(resume_id: str, db: Session = Depends(get_db)):
    delete_resume(db, resume_id)
    return Response(status_code=204)


@router.get("/{resume_id}/preview", response_class=HTMLResponse)
def preview_resume(resume_id: str, db: Session = Depends(get_db)):
    return HTMLResponse(render_resume_html(_resume_or_404(db, resume_id)))


@router.get("/{resume_id}/pdf")
def export_pdf(resume_id: str, db: Session = Depends(get_db)):
    resume = _resume_or_404(db, resume_id)
    pdf = render_resume_pdf(resume)
    filename = f"resume_{resume.id}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{resume_id}/import", response_model=ResumeProfile)
async def import_into_resume(
    resume_id: str,
    text: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    """Parse pasted text or an uploaded file with AI and merge it into the profile."""
    resume = _resume_or_404(db, resume_id)
    if file is not None and file.filename:
        contents = await file.read()
        if not contents:
            raise HTTPException(400, "Uploaded file is empty")
        source = ResumeDocument(
            data=contents,
            mime_type=guess_mime_type(file.filename, file.content_type),
            filename=file.filename,
        )
    elif text and text.strip():
        source = text
    else:
        raise HTTPException(400, "Provide resume text or a file to import")

    service = get_ai_service(get_ai_settings(db))
    parsed = await import_resume(service, source)
    return save_resume(db, apply_parsed_resume(resume, parsed))


@router.post("/{resume_id}/analyze", response_model=OptimizationResult)
async def analyze_stored_resume(resume_id: str, body: AnalyzeRequest, db: Session = Depends(get_db)):
    resume = _resume_or_404(db, resume_id)
    if not body.job_description.strip():
        raise HTTPException(400, "No job description provided")
    service = get_ai_service(get_ai_settings(db))
    return await service.analyze_resume(resume, body.job_description)


@router.post("/{resume_id}/experience/{experience_id}/rewrite", response_model=RewriteResponse)
async def rewrite_experience(
    resume_id: str,
    experience_id: str,
    body: Optional[RewriteContext] = None,
    db: Session = Depends(get_db),
):
    """Rewrite variations for one experience entry's description."""
    resume = _resume_or_404(db, resume_id)
    exp = next((e for e in resume.experience if e.id == experience_id), None)
    if not exp:
        raise HTTPException(404, "experience not found")
    if not exp.description.strip():
        raise HTTPException(400, "Experience has no description to rewrite")
    service = get_ai_service(get_ai_settings(db))
    jd = body.job_description if body else None
    variations = await service.rewrite_bullet_point(exp.description, jd)
    return RewriteResponse(variations=variations)
