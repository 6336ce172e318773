"""
Configuración centralizada de la aplicación
"""
import json
from decimal import Decimal
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # API Settings
    API_TITLE: str = "FastPOS API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Punto de venta con cierre de caja en USD y bolívares"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Local persistent storage (always available)
    LOCAL_DATABASE_URL: str = "sqlite:///./fastpos.db"

    # Remote store - optional. Missing credentials mean offline mode.
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Exchange rate (VES per USD)
    EXCHANGE_RATE_API_URL: str = "https://ve.dolarapi.com/v1/dolares/oficial"
    EXCHANGE_RATE_TIMEOUT: Optional[float] = None
    DEFAULT_EXCHANGE_RATE: Decimal = Decimal("45.00")

    # Sync
    # rollback: drop the optimistic record when the remote insert fails
    # keep: keep it locally as the authoritative copy
    SYNC_INSERT_FAILURE_POLICY: str = "rollback"
    REMOTE_FETCH_LIMIT: int = 200

    DEFAULT_CUSTOMER_NAME: str = "Cliente"

    # Front-end origins: "a,b" or a JSON array
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:5173"

    def get_allowed_origins(self) -> List[str]:
        """CORS origins as a list"""
        raw = (self.ALLOWED_ORIGINS or "").strip()
        if not raw:
            return []

        if raw.startswith("["):
            try:
                return [str(origin) for origin in json.loads(raw)]
            except ValueError:
                pass

        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
