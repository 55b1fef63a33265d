"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.enums import PersistenceBackend


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Persistence
    persistence_backend: PersistenceBackend = PersistenceBackend.MEMORY
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "approvalflow_dev"
    
    # Workflow definitions (directory of *.json documents)
    definitions_path: str = "./definitions"
    
    # Events
    event_id_prefix: str = "EVT"
    
    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"
    log_to_file: bool = True
    
    # CORS - set to "*" to allow all origins
    cors_origins: str = "*"
    
    # Environment
    environment: str = "development"
    debug: bool = True
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]
    
    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
