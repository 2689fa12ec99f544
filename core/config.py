# core/config.py - Configuration DesignQuote chargée depuis l'environnement

import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    """Paramètres applicatifs (variables d'environnement / fichier .env)"""
    app_name: str = os.getenv("APP_NAME", "DesignQuote - Intelli-Quoter")
    environment: str = os.getenv("ENVIRONMENT", "dev")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./designquote.db")

    # Identité (jetons bearer)
    jwt_secret_key: str = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_IN_PRODUCTION_USE_LONG_RANDOM_STRING")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Devis
    default_tax_rate: float = float(os.getenv("DEFAULT_TAX_RATE", "18"))
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")
    company_name: str = os.getenv("COMPANY_NAME", "DesignQuote Interiors")

    # Logs
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "designquote.log")
    workflow_log_file: str = os.getenv("WORKFLOW_LOG_FILE", "logs/workflow.log")


settings = Settings()
