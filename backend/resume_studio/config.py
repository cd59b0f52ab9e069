"""
Runtime configuration for the Resume Studio backend.

Values come from the environment (optionally a .env file). Anything that
tests need to change per-call (like the API_KEY fallback) is read lazily.
"""
from dotenv import load_dotenv
load_dotenv()
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./resume_studio.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AI_TIMEOUT = float(os.getenv("AI_TIMEOUT", "60"))

DEFAULT_PROVIDER = "gemini"
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"

# provider id -> (default base URL, default model)
PROVIDER_PRESETS = {
    "gemini": ("", DEFAULT_GEMINI_MODEL),
    "deepseek": ("https://api.deepseek.com", "deepseek-chat"),
    "moonshot": ("https://api.moonshot.cn/v1", "moonshot-v1-8k"),
    "qwen": ("https://dashscope.aliyuncs.com/compatible-mode/v1", "qwen-plus"),
    "minimax": ("https://api.minimax.chat/v1", "abab6.5-chat"),
    "grok": ("https://api.x.ai/v1", "grok-beta"),
    "openai_custom": ("https://api.openai.com/v1", "gpt-4o"),
}


def cors_origins() -> list[str]:
    origins_env = os.getenv("CORS_ORIGINS")
    origins = [o.strip() for o in (origins_env or "").split(",") if o.strip()]
    if not origins:
        # Local dev frontends (Vite 5173, Next.js 3000)
        origins = ["http://localhost:5173", "http://localhost:3000"]
    return origins


def env_api_key() -> str | None:
    """Gemini key fallback used when the stored settings carry none."""
    return os.getenv("API_KEY") or None
