from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Any, List, Optional
import uvicorn

from tabular_qa.domain.models import MatchMethod
from tabular_qa.infrastructure.config import settings
from tabular_qa.infrastructure.container import build_container

# ── API Models ───────────────────────────────────────────────────────────────
class AskRequest(BaseModel):
    # Any type accepted; non-strings are answered like a missing question
    question: Any = None

class AskResponse(BaseModel):
    answer: str
    source: Optional[str] = None
    sheet: Optional[str] = None
    confidence: Optional[float] = None
    matchMethod: Optional[str] = None

class SheetSchema(BaseModel):
    sheet: str
    count: int

class SheetsResponse(BaseModel):
    sheets: List[SheetSchema]

# ── App Initialization ───────────────────────────────────────────────────────
app = FastAPI(
    title="Spreadsheet Knowledge Assistant API",
    description="Hybrid TF-IDF question answering over a multi-sheet spreadsheet, "
                "with source-page summaries and web-search fallback.",
    version="1.0.0"
)

# ── CORS Middleware ──────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Index is built once here and only read by request handlers
container = build_container(settings)

if container.index.is_empty():
    print("[API] WARNING: No records loaded. All questions will be answered from web search.")
else:
    print(f"[API] Index ready: {len(container.index)} records. Service is READY.")

# ── Endpoints ────────────────────────────────────────────────────────────────
@app.get("/")
def read_root():
    return {
        "message": "Spreadsheet Knowledge Assistant API is running.",
        "status": "ready" if not container.index.is_empty() else "web_search_only",
        "records_indexed": len(container.index),
    }

@app.get("/status")
def get_status():
    """Returns what was indexed at startup and the active routing threshold."""
    return {
        "is_ready": not container.index.is_empty(),
        "records_indexed": len(container.index),
        "vocabulary_size": len(container.index.vocabulary),
        "sheets": [entry["sheet"] for entry in container.index.group_counts()],
        "data_path": str(container.settings.DATA_PATH),
        "confidence_threshold": container.router.config.confidence_threshold,
    }

@app.get("/sheets", response_model=SheetsResponse)
def get_sheets():
    """Returns the list of loaded sheets and their row counts."""
    return SheetsResponse(sheets=[SheetSchema(**entry) for entry in container.index.group_counts()])

@app.post("/ask", response_model=AskResponse, response_model_exclude_none=True)
def ask(request: Optional[AskRequest] = Body(None)):
    question = request.question if request is not None else None
    if not isinstance(question, str):
        question = None
    try:
        answer = container.router.answer(question)
        return AskResponse(**answer.to_payload())
    except Exception as e:
        print(f"[API] Error answering '{question}': {e!r}")
        return JSONResponse(
            status_code=500,
            content={
                "answer": "Sorry, something went wrong while answering your question.",
                "matchMethod": MatchMethod.ERROR.value,
                "error": "internal_server_error",
            },
        )

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=9000)
