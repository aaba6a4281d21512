# tabular_qa/infrastructure/config.py

from pathlib import Path
from typing import Dict, List

from pydantic_settings import BaseSettings

from tabular_qa.application.answer_router import DEFAULT_BLOCKED_SIGNATURES, DEFAULT_SMALL_TALK


class Settings(BaseSettings):
    # Project root = repository root
    BASE_DIR: Path = Path(__file__).resolve().parents[2]

    DATA_DIR: Path = BASE_DIR / "data"
    DATA_PATH: Path = DATA_DIR / "california_pipeline_multi_hazard_sources.xlsx"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ]

    # ── Routing ─────────────────────────────────────────────────────────────
    # Deployments have used anything from 0.05 to 0.40 here
    CONFIDENCE_THRESHOLD: float = 0.15
    MIN_SUMMARY_CHARS: int = 50
    WEB_ABSTRACT_MAX_CHARS: int = 600
    SUMMARY_TOP_K: int = 6

    # ── Network ─────────────────────────────────────────────────────────────
    FETCH_TIMEOUT_SECONDS: float = 30.0
    SEARCH_TIMEOUT_SECONDS: float = 10.0

    # ── Record scoring ──────────────────────────────────────────────────────
    COSINE_WEIGHT: float = 0.55
    JACCARD_WEIGHT: float = 0.25
    FIELD_BONUS_WEIGHT: float = 0.20
    FIELD_BONUS_INCREMENT: float = 0.15
    FIELD_BONUS_CAP: float = 0.5

    # ── Line scoring (summarizer) ───────────────────────────────────────────
    LINE_COSINE_WEIGHT: float = 0.5
    LINE_JACCARD_WEIGHT: float = 0.3
    LINE_OVERLAP_WEIGHT: float = 0.2

    # ── Field priority lists (first non-empty wins) ─────────────────────────
    TEXT_FIELDS: List[str] = ["Dataset / Reference Name", "Title", "Name", "Topic", "Description"]
    TITLE_FIELDS: List[str] = ["Dataset / Reference Name", "Title", "Name", "Topic"]
    LINK_FIELDS: List[str] = ["Link", "Primary URL", "Download / Service URL", "URL"]

    SMALL_TALK: Dict[str, str] = dict(DEFAULT_SMALL_TALK)
    BLOCKED_SIGNATURES: List[str] = list(DEFAULT_BLOCKED_SIGNATURES)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
