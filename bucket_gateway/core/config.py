"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from bucket_gateway.schemas.domain import AdmissionPolicy

DEFAULT_ALLOWED_CONTENT_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "application/pdf",
    "text/plain",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Auth
    API_KEY: str = ""

    # MinIO / S3
    S3_ENDPOINT: str = "http://localhost:9000"
    S3_ACCESS_KEY: str = "minioadmin"
    S3_SECRET_KEY: str = "minioadmin"
    S3_REGION: str | None = None
    # Comma-separated bindings: "docs,images=prod-images"
    S3_BUCKETS: str = ""
    S3_AUTO_CREATE_BUCKETS: bool = False

    # Admission policy
    MAX_FILE_SIZE_MB: int = 100
    ALLOWED_CONTENT_TYPES: str = ",".join(DEFAULT_ALLOWED_CONTENT_TYPES)

    # Remote fetch
    REMOTE_FETCH_TIMEOUT_SECONDS: float = 30.0

    # Application
    APP_NAME: str = "Bucket Gateway"
    APP_ENV: str = "dev"
    CORS_ALLOW_ORIGINS: str = "*"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def bucket_bindings(self) -> dict[str, str]:
        """Map public bucket names to backend bucket names."""
        bindings: dict[str, str] = {}
        for entry in _split_csv(self.S3_BUCKETS):
            name, _, backend = entry.partition("=")
            bindings[name.strip()] = backend.strip() or name.strip()
        return bindings

    def cors_origins(self) -> list[str]:
        return _split_csv(self.CORS_ALLOW_ORIGINS)

    def admission_policy(self) -> AdmissionPolicy:
        return AdmissionPolicy(
            max_size=self.MAX_FILE_SIZE_MB * 1024 * 1024,
            allowed_content_types=tuple(_split_csv(self.ALLOWED_CONTENT_TYPES)),
        )


# Global settings instance
settings = Settings()
