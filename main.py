# main.py - Serveur DesignQuote (devis de design d'intérieur)
import uvicorn
import logging
import sys
from datetime import datetime
from contextlib import asynccontextmanager
from fastapi import FastAPI

from core.config import settings
from db.session import init_db
from routes.routes_quotes import router as quotes_router
from routes.routes_catalog import router as catalog_router
from routes.routes_clients import router as clients_router
from routes.routes_templates import router as templates_router
from routes.routes_settings import router as settings_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.log_file, encoding='utf-8'),
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestionnaire de cycle de vie de l'application"""
    try:
        logger.info("=" * 50)
        logger.info(f"DEMARRAGE DE {settings.app_name} ({settings.environment})")
        logger.info("=" * 50)

        init_db()
        logger.info("Tables vérifiées / créées")

        logger.info("   Sante: http://localhost:8000/health")
        logger.info("   Documentation: http://localhost:8000/docs")
        yield
    except Exception as e:
        logger.error(f"Erreur critique au démarrage: {e}")
        raise
    finally:
        logger.info(f"Arrêt de {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="Création de devis, calcul des totaux, workflow d'approbation et export PDF",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(quotes_router)
app.include_router(catalog_router)
app.include_router(clients_router)
app.include_router(templates_router)
app.include_router(settings_router)


@app.get("/health")
async def health_check():
    """Endpoint de contrôle de santé"""
    return {
        "service": settings.app_name,
        "status": "active",
        "environment": settings.environment,
        "timestamp": datetime.now().isoformat(),
    }


@app.get("/")
async def root():
    """Endpoint racine avec informations de base"""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "status": "operational",
        "endpoints": {
            "health": "/health",
            "documentation": "/docs",
            "quotes": "/api/quotes",
            "catalog": "/api/catalog",
            "clients": "/api/clients",
        }
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)
