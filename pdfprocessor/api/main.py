import os
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pdfprocessor.api.endpoints import extract
from pdfprocessor.common.logging_config import get_logger, set_request_id, setup_logging

CORS_ORIGINS_ENV = "PDFPROCESSOR_CORS_ORIGINS"
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"

# Initialize Structured Logging
setup_logging()
logger = get_logger("api.main")

app = FastAPI(title="PDF Processor API", version="1.0.0")


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Tag every log line of the request with one id and echo it back to the client."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(request_id)
    started = time.perf_counter()
    logger.info(
        f"{request.method} {request.url.path}",
        client=request.client.host if request.client else "unknown",
    )

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {e}",
            exc_info=True,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        raise

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        status_code=response.status_code,
        elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


# CORS: the web front end reads the workbook name and failed files from headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv(CORS_ORIGINS_ENV, DEFAULT_CORS_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Failed-Files", "Content-Disposition"],
)

app.include_router(extract.router, prefix="/api/extract", tags=["Extract"])


@app.get("/api/health")
def health_check():
    return {"status": "ok", "app": "PDF Processor"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8010)
