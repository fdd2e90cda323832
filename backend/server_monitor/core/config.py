import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "true").lower() == "true"
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    cors_origins_raw: str = os.getenv("CORS_ORIGINS", "http://localhost:8501")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./server_room.db")
    storage_backends_raw: str = os.getenv("STORAGE_BACKENDS", "sql,json")
    json_store_path: str = os.getenv("JSON_STORE_PATH", "./monitoring_data.json")
    mongo_url: str = os.getenv("MONGO_URL", "mongodb://localhost:27017")
    mongo_database: str = os.getenv("MONGO_DATABASE", "server_room")
    mongo_collection: str = os.getenv("MONGO_COLLECTION", "monitoring_records")
    mongo_timeout_ms: int = int(os.getenv("MONGO_TIMEOUT_MS", "3000"))
    seed_sample_data: bool = os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"
    default_chart_period: int = int(os.getenv("DEFAULT_CHART_PERIOD", "7"))
    items_per_page: int = int(os.getenv("ITEMS_PER_PAGE", "10"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "logs/application.log")

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_origins_raw.split(",") if item.strip()]

    @property
    def storage_backends(self) -> list[str]:
        return [item.strip().lower() for item in self.storage_backends_raw.split(",") if item.strip()]


settings = Settings()
