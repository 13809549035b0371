from pydantic_settings import BaseSettings
from typing import List, Any, Set
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_allowlist(v: str) -> Set[str]:
    """Parse a comma-separated allow-list into a normalized set"""
    if not v:
        return set()
    return {item.strip().upper() for item in v.split(',') if item.strip()}


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Campus e-Voting"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"
    TESTING: bool = False

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT: int = 30  # seconds a writer waits for the SQLite lock
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # ==========================================
    # Google Sign-In
    # ==========================================
    GOOGLE_CLIENT_ID: str = ""

    # ==========================================
    # Object Storage (S3 / MinIO)
    # ==========================================
    USE_MINIO: bool = True
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "evoting-uploads"
    MINIO_ENDPOINT: str = "localhost:9000"
    STORAGE_PUBLIC_URL: str = ""  # Base URL for stored objects; derived from endpoint when empty
    STORAGE_MAX_RETRIES: int = 3

    # ==========================================
    # Biometric (face) verification service
    # ==========================================
    BIOMETRIC_API_URL: str = "https://api.skybiometry.com/fc"
    BIOMETRIC_API_KEY: str = ""
    BIOMETRIC_API_SECRET: str = ""
    BIOMETRIC_NAMESPACE: str = "nacos_e_voting"
    BIOMETRIC_TIMEOUT: float = 30.0  # seconds
    FACE_DUPLICATE_THRESHOLD: float = 85.0  # recognition confidence above which a face is a duplicate

    # ==========================================
    # Verification uploads
    # ==========================================
    MAX_DOCUMENT_SIZE: int = 10485760  # 10MB
    MAX_FACE_IMAGE_SIZE: int = 5242880  # 5MB

    # ==========================================
    # Matriculation numbers
    # ==========================================
    MATRIC_NUMBER_DIGITS: int = 9
    MATRIC_LEGACY_ALLOWLIST: str = ""  # comma-separated legacy ids accepted verbatim

    @property
    def MATRIC_LEGACY_IDS(self) -> Set[str]:
        """Parse the legacy matric allow-list"""
        return parse_allowlist(self.MATRIC_LEGACY_ALLOWLIST)

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    CAST_VOTE_RATE_LIMIT: str = "20/minute"
    SIGNIN_RATE_LIMIT: str = "10/minute"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # ==========================================
    # Seeding
    # ==========================================
    ADMIN_EMAIL: str = "admin@evoting.local"
    ADMIN_FULL_NAME: str = "System Administrator"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def storage_base_url(self) -> str:
        """Public base URL under which uploaded objects are reachable"""
        if self.STORAGE_PUBLIC_URL:
            return self.STORAGE_PUBLIC_URL.rstrip("/")
        if self.USE_MINIO:
            return f"http://{self.MINIO_ENDPOINT}/{self.S3_BUCKET_NAME}"
        return f"https://{self.S3_BUCKET_NAME}.s3.{self.AWS_REGION}.amazonaws.com"


# Create settings instance
settings = Settings()
