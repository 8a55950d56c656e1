"""
Catalog Service configuration using shared patterns
"""

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the catalog service directory path
CATALOG_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = CATALOG_SERVICE_DIR / ".env"


class ProductSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str
    APP_VERSION: str
    DEBUG: bool
    ENVIRONMENT: str
    LOG_LEVEL: str

    # Service specific
    SERVICE_NAME: str

    # Database
    PRODUCT_DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 25
    DATABASE_MAX_OVERFLOW: int = 50

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str
    KAFKA_TOPIC_PRODUCT_EVENTS: str = "product_events"
    KAFKA_TOPIC_PRODUCT_NOTIFICATIONS: str = "product_events_for_notifications"

    # Elasticsearch for the product search index
    ELASTICSEARCH_URL: str = "http://localhost:9200"
    ELASTICSEARCH_USERNAME: Optional[str] = None
    ELASTICSEARCH_PASSWORD: Optional[str] = None
    ELASTICSEARCH_INDEX: str = "microservice_products"
    ELASTICSEARCH_REQUEST_TIMEOUT: int = 10

    # Uploads
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # CORS
    CORS_ORIGINS: List[str]
    CORS_CREDENTIALS: bool
    CORS_METHODS: List[str]
    CORS_HEADERS: List[str]


# Create a singleton instance
_settings_instance = None


def get_settings() -> ProductSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ProductSettings()
    return _settings_instance
