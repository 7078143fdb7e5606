"""
Module principal de l'application FastAPI du portail d'enchères.

Configure l'instance FastAPI, le logging, le CORS et inclut les routeurs
(authentification, utilisateurs, catalogue, enchères).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deals.config import settings
from deals.database import create_tables

# --- Importer les routeurs ---
from deals.auth.router import auth_router
from deals.users.router import user_router
from deals.products.router import product_router
from deals.bids.router import bid_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Crée les tables manquantes au démarrage."""
    await create_tables()
    logger.info("Tables vérifiées/créées.")
    yield

app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.PORTAL_NAME} API",
    description="API du portail d'enchères : catalogue de lots, enchères des acheteurs, décisions administrateur.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.PORTAL_URL,
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range"],
)

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(auth_router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["Authentification"])
app.include_router(user_router, prefix=f"{settings.API_V1_PREFIX}/users", tags=["Utilisateurs"])
app.include_router(product_router, prefix=f"{settings.API_V1_PREFIX}/products", tags=["Catalogue"])
app.include_router(bid_router, prefix=f"{settings.API_V1_PREFIX}/bids", tags=["Enchères"])

@app.get("/")
async def read_root():
    return {"message": f"Bienvenue sur l'API {settings.PORTAL_NAME}"}

logger.info(f"Application {settings.PORTAL_NAME} initialisée (préfixe API: {settings.API_V1_PREFIX}).")
