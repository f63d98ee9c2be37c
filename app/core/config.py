from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Marky Studio"
    API_V1_STR: str = "/api/v1"
    DATABASE_URL: str = "sqlite:///./marky_studio.db"

    # Bearer tokens issued by the external auth provider (HS256 shared secret)
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:5173"
    ALLOWED_ORIGIN: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Image generation
    IMAGE_PROVIDER: str = "gemini"  # "gemini" or "imagen"
    GEMINI_API_KEY: str = ""
    GENERATIVE_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    IMAGEN_MODEL: str = "imagen-3.0-generate-001"
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image-preview"
    GENERATION_TIMEOUT: Optional[float] = None  # no timeout unless configured
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Optional re-upload of generated images to an S3-compatible asset host
    ASSET_UPLOAD_ENABLED: bool = False
    minio_endpoint: str = "localhost:9000"
    minio_secure: bool = False
    minio_access_key: str = ""
    minio_secret_key: str = ""
    minio_bucket: str = "generated-images"
    ASSET_PUBLIC_BASE_URL: Optional[str] = None

    # Persistence of generated images: "database" or "memory"
    STORAGE_BACKEND: str = "database"

    # Transactional email: "sendgrid" or "smtp"
    EMAIL_PROVIDER: str = "sendgrid"
    SENDGRID_API_KEY: str = ""
    SENDGRID_API_URL: str = "https://api.sendgrid.com/v3/mail/send"
    SENDGRID_FROM_EMAIL: str = "noreply@markyai.com"
    SENDGRID_FROM_NAME: str = "Marky AI Studio"
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SUPPORT_EMAIL: str = "support@markyai.com"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"

    @property
    def cors_origins(self) -> list:
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        if self.ALLOWED_ORIGIN and self.ALLOWED_ORIGIN not in origins:
            origins.append(self.ALLOWED_ORIGIN)
        return origins

settings = Settings()
