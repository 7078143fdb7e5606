import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

DEFAULT_JWT_SECRET = "remplacer_par_une_vraie_cle_secrete_forte"

# Classe de configuration utilisant Pydantic BaseSettings
class Settings(BaseSettings):
    # --- Portail ---
    PORTAL_NAME: str = "Deals Portal"
    PORTAL_URL: str = "http://localhost:8000"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # --- SMTP ---
    SENDER_EMAIL: str = "updates@deals-portal.example"
    SENDER_NAME: str = "Deals Portal"
    SENDER_PASSWORD: Optional[str] = None
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 10.0

    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # --- Base de Données ---
    DATABASE_URL: Optional[str] = None # Prioritaire sur les paramètres POSTGRES_* si défini
    POSTGRES_DB: str = "deals"
    POSTGRES_USER: str = "deals"
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    DB_ECHO_LOG: bool = False

    # --- JWT ---
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # --- Règles d'enchères ---
    ENFORCE_CLOSE_BID_DATE: bool = True
    ENFORCE_CASE_QUANTITY: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore' # Ignorer les variables d'env non définies dans le modèle

    @property
    def database_url(self) -> str:
        """URL SQLAlchemy async effective."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

# Instancier la classe de configuration
settings = Settings()

# --- Validation des secrets (non bloquante) ---
if settings.SENDER_PASSWORD is None:
    logger.critical("La variable d'environnement SENDER_PASSWORD n'est pas définie! Les emails ne pourront pas être envoyés.")

if settings.DATABASE_URL is None and settings.POSTGRES_PASSWORD is None:
    logger.critical("Ni DATABASE_URL ni POSTGRES_PASSWORD ne sont définis!")

if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
    logger.warning("La variable JWT_SECRET_KEY utilise la valeur par défaut. Veuillez définir une clé secrète forte.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, Sender={settings.SENDER_EMAIL}")
