"""
Application Settings Management

Central configuration for the workspace service: metadata store, vector store,
blob store, embedding provider, deletion policy and logging.

IMPORTANT:
- Secrets (API keys, S3 credentials) must come from environment variables
- Local development reads `.env.local` at the project root: cp .env.example .env.local
- Every field can be overridden with a RAGSPACE_ prefixed environment variable
"""

from enum import Enum
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ragspace/settings.py -> ragspace/ -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

ENV_FILE = PROJECT_ROOT / ".env.local"


class VectorDeletePolicy(str, Enum):
    """How a failed vector-store deletion affects the enclosing delete call.

    best_effort: log the failure and keep going (metadata is still removed)
    strict: raise before touching blobs or metadata
    """

    best_effort = "best_effort"
    strict = "strict"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==================== Environment ====================
    # "local-dev" | "test" | "production"
    environment: str = "local-dev"

    # ==================== Server ====================
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ==================== Metadata store ====================
    # "memory": process-local dict (single instance only)
    # "redis": Redis-backed, safe for multi-instance deployments
    metadata_backend: str = "memory"

    # "in_memory": FakeRedis, no external service required
    # "redis": real Redis instance (Docker, managed, ...)
    redis_type: str = "in_memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_index: int = 0
    redis_password: str | None = None
    redis_socket_timeout: int = 5
    redis_socket_connect_timeout: int = 5

    # ==================== Vector store ====================
    # "memory" | "lancedb"
    vector_backend: str = "memory"
    # Local directory, or db://<database> for LanceDB Cloud
    lancedb_uri: str = "data/lancedb"
    lancedb_api_key: str | None = None
    lancedb_region: str = "us-east-1"

    # ==================== Embeddings ====================
    # "mock" | "openai"
    embedding_backend: str = "mock"
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # ==================== Blob store ====================
    # "memory" | "filesystem" | "s3"
    blob_backend: str = "memory"
    # Relative paths resolve against the project root
    blob_root: str = "data/blobs"

    s3_bucket: str = ""
    s3_endpoint: str | None = None
    s3_region: str = "us-east-1"
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_force_path_style: bool = False

    # ==================== Coordination ====================
    vector_delete_policy: VectorDeletePolicy = VectorDeletePolicy.best_effort
    # Upper bound on concurrent blob deletions during workspace teardown
    blob_delete_concurrency: int = 16

    # ==================== Logging ====================
    logs_dir: str = "logs"
    log_to_file: bool = False
    log_max_bytes: int = 20 * 1024 * 1024  # 20MB
    log_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="RAGSPACE_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Reject unknown backend names early instead of at first use."""
        choices = {
            "metadata_backend": ("memory", "redis"),
            "redis_type": ("in_memory", "redis"),
            "vector_backend": ("memory", "lancedb"),
            "embedding_backend": ("mock", "openai"),
            "blob_backend": ("memory", "filesystem", "s3"),
        }
        for field_name, allowed in choices.items():
            value = getattr(self, field_name)
            if value not in allowed:
                raise ValueError(f"{field_name} must be one of {allowed}, got {value!r}")
        if self.blob_delete_concurrency < 1:
            raise ValueError("blob_delete_concurrency must be >= 1")
        return self

    # ==================== Path helpers ====================

    @classmethod
    def get_project_root(cls) -> Path:
        """Absolute path of the project root."""
        return PROJECT_ROOT

    def _resolve(self, raw: str) -> Path:
        path = Path(raw)
        if path.is_absolute():
            return path
        return self.get_project_root() / path

    def get_blob_root(self) -> Path:
        """Root directory for the filesystem blob store."""
        return self._resolve(self.blob_root)

    def get_logs_root(self) -> Path:
        """Root directory for rotating log files."""
        return self._resolve(self.logs_dir)

    def get_lancedb_uri(self) -> str:
        """LanceDB connection URI; cloud URIs are returned unchanged."""
        if self.is_lancedb_cloud():
            return self.lancedb_uri
        return str(self._resolve(self.lancedb_uri))

    def is_lancedb_cloud(self) -> bool:
        return self.lancedb_uri.startswith("db://")

    def is_s3_configured(self) -> bool:
        """Check that bucket and credentials are all present."""
        return bool(self.s3_bucket and self.s3_access_key and self.s3_secret_key)


settings = Settings()
