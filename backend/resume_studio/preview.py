"""Print-ready HTML preview and PDF export of a resume profile."""
from pathlib import Path

from fastapi import HTTPException
from jinja2 import Environment, FileSystemLoader, select_autoescape
# WeasyPrint needs system libraries; the server still boots without it
try:
    from weasyprint import HTML  # type: ignore
except Exception:  # pragma: no cover - environment without weasyprint
    HTML = None  # type: ignore

from .schemas import ResumeProfile

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_resume_html(resume: ResumeProfile) -> str:
    return env.get_template("resume.html").render(r=resume)


def render_resume_pdf(resume: ResumeProfile) -> bytes:
    html = render_resume_html(resume)
    if HTML is None:
        # Defer failure until a PDF is actually requested
        raise HTTPException(500, "WeasyPrint is not installed. Install 'weasyprint' to enable PDF export.")
    return HTML(string=html, base_url=str(TEMPLATES_DIR)).write_pdf()
