from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Teashop"
    APP_PORT: int = 9300
    APP_URL: str = "http://localhost:3000"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "teashop"
    POSTGRES_PORT: int = 5432
    DATABASE_URL_OVERRIDE: Optional[str] = None  # e.g. sqlite:///./teashop.db
    
    # Mollie
    MOLLIE_API_KEY: Optional[str] = None
    MOLLIE_API_URL: str = "https://api.mollie.com/v2"
    PAYMENT_CURRENCY: str = "EUR"
    
    # Brevo transactional mail
    BREVO_API_KEY: Optional[str] = None
    BREVO_API_URL: str = "https://api.brevo.com/v3"
    MAIL_FROM_EMAIL: str = "noreply@yibeitea.be"
    MAIL_FROM_NAME: str = "Yibei Tea"
    
    # Outbound HTTP
    HTTP_TIMEOUT: float = 10.0
    
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
    
    @property
    def MOLLIE_WEBHOOK_URL(self) -> str:
        return f"{self.APP_URL.rstrip('/')}/api/webhooks/mollie"
    
    class Config:
        env_file = ".env"
        extra = "ignore"

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
