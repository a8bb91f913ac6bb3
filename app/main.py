# Run from project root: uvicorn app.main:app --reload

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.core.errors import MissingQueryError, ServiceUnavailableError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="BibleRAG API",
    description="KJV verse search with Hebrew/Greek cross-reference and LLM explanations",
    version="1.0.0",
)

# CORS for the browser chat client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.exception_handler(MissingQueryError)
async def missing_query_handler(request: Request, exc: MissingQueryError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
    logger.warning("Service unavailable (%s): %s", exc.service or "unknown", exc.message)
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.get("/", tags=["system"])
def root():
    return {"message": "BibleRAG API"}
