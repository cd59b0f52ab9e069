import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import LOG_LEVEL, cors_origins
from .db import Base, engine
from . import models  # noqa: F401  (registers tables on Base)
from .ai_services import AIServiceError
from .encryption import EncryptionError

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Resume Studio Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)


@app.exception_handler(AIServiceError)
async def ai_error_handler(request: Request, exc: AIServiceError):
    # openSettings tells the client to open its API settings dialog
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "openSettings": exc.requires_settings},
    )


@app.exception_handler(EncryptionError)
async def encryption_error_handler(request: Request, exc: EncryptionError):
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc), "openSettings": False})


@app.get("/health")
def health():
    return {"ok": True}


from .api.routes_resumes import router as resumes_router
from .api.routes_settings import router as settings_router
from .api.routes_ai import router as ai_router
app.include_router(resumes_router)
app.include_router(settings_router)
app.include_router(ai_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
