# backend/aquaguardian/config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

HISTORY_LIMIT = 10


def _parse_origins(raw: str) -> list[str]:
    if not raw:
        return ["*"]
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    return parts or ["*"]


@dataclass(frozen=True)
class Settings:
    database_url: str
    cors_origins: list[str]
    assessor_mode: str  # local | remote
    llm_api_key: str
    llm_api_url: str
    llm_model: str
    llm_timeout_sec: float
    sim_interval_sec: int
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def remote_enabled(self) -> bool:
        return self.assessor_mode == "remote" and bool(self.llm_api_key)


def load_settings() -> Settings:
    model = os.getenv("LLM_MODEL", "gemini-1.5-flash")
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./aquaguardian.db"),
        cors_origins=_parse_origins(os.getenv("CORS_ORIGINS", "")),
        assessor_mode=os.getenv("ASSESSOR_MODE", "local").strip().lower(),
        llm_api_key=os.getenv("LLM_API_KEY", ""),
        llm_api_url=os.getenv("LLM_API_URL", GEMINI_URL.format(model=model)),
        llm_model=model,
        llm_timeout_sec=float(os.getenv("LLM_TIMEOUT_SEC", "15")),
        sim_interval_sec=int(os.getenv("SIM_INTERVAL_SEC", "5")),
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )
