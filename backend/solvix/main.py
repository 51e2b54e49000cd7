"""
SOLVIX DEVIS — API REST FastAPI
Point d'entrée principal.
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from solvix.database import close_pool
from solvix.api import auth, devis

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: fermer proprement le pool DB a l'arret."""
    logger.info("Démarrage Solvix Devis API")
    yield
    close_pool()


app = FastAPI(
    title="Solvix Devis API",
    version="1.0.0",
    description="Rendu HTML, impression et export PDF des devis Solvix",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- ERROR HANDLER ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Erreur non gérée sur %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Erreur interne, veuillez réessayer"},
    )

# --- ROUTERS ---
app.include_router(auth.router)
app.include_router(devis.router)


# --- HEALTH CHECK ---
@app.get("/health")
async def health():
    return {"status": "ok", "service": "solvix-devis-api"}


@app.get("/health/db")
async def health_db():
    try:
        from solvix.database import get_cursor
        with get_cursor() as cur:
            cur.execute("SELECT 1")
        return {"status": "ok", "db": "connected"}
    except Exception as e:
        logger.warning("Health DB: %s", e)
        return {"status": "error", "db": str(e)}


@app.get("/")
async def root():
    return {
        "service": "Solvix Devis API",
        "version": "1.0.0",
        "docs": "/docs",
    }
