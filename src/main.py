import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from create_tables import create_tables
from signflow import __version__
from signflow.logging import configure_logging, get_logger
from signflow.documents.dependencies import build_document_store
from signflow.documents.job import start_deletion_job
from signflow.documents.controllers.document_controller import router as document_router
from signflow.documents.controllers.signature_controller import router as signature_router
from signflow.documents.controllers.validation_controller import router as validation_router
from signflow.documents.controllers.cleanup_controller import router as cleanup_router

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup logic ---
    logger.info("Starting SignFlow integrity service")
    create_tables()
    scheduler = start_deletion_job(build_document_store)
    yield
    # --- Shutdown logic ---
    scheduler.shutdown(wait=False)
    logger.info("SignFlow integrity service stopped")

app = FastAPI(
    title="SignFlow Integrity",
    description="API de integridad, validación y ciclo de vida de documentos firmados",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Accept",
        "Accept-Language",
        "Content-Language",
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Origin",
    ],
    expose_headers=["X-Document-Hash"],
    max_age=86400,
)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}

# Routers
app.include_router(document_router, prefix="/documents", tags=["documents"])
app.include_router(signature_router)
app.include_router(validation_router)
app.include_router(cleanup_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
