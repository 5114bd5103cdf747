"""Pydantic models for configuration."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """Record store connection settings."""

    url: str = Field(
        default="sqlite:///./video_queue.db",
        description="databases/SQLAlchemy URL (sqlite:/// or postgresql://)",
    )


class DiscoveryConfig(BaseModel):
    """Filesystem scan settings."""

    videos_dir: str = Field(default="./videos", description="Root directory to scan")
    extensions: List[str] = Field(
        default_factory=lambda: [".mp4"], description="Media file suffixes to pick up"
    )

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        """Lowercase and ensure a leading dot (e.g. 'MP4' -> '.mp4')."""
        if not v:
            raise ValueError("at least one extension is required")
        return sorted({(e if e.startswith(".") else f".{e}").lower() for e in v})


class PaginationConfig(BaseModel):
    """Queue view paging bounds."""

    default_page_size: int = Field(default=10, ge=1, description="Page size when none is given")
    max_page_size: int = Field(default=100, ge=1, description="Upper clamp for page size")

    @field_validator("max_page_size")
    @classmethod
    def max_not_below_default(cls, v: int, info) -> int:
        if "default_page_size" in info.data and v < info.data["default_page_size"]:
            raise ValueError(
                f"max_page_size ({v}) must be >= default_page_size ({info.data['default_page_size']})"
            )
        return v


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, gt=0, lt=65536)
    api_prefix: str = Field(default="/api", description="Prefix for queue routes")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    """Complete application configuration with validation."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        """Create config from nested dict (YAML)."""
        return cls(**data)

    def merge_cli_overrides(self, cli_args: dict) -> "AppConfig":
        """Apply CLI overrides and return new config instance."""
        config_dict = self.model_dump()

        if cli_args.get("database_url") is not None:
            config_dict["database"]["url"] = cli_args["database_url"]
        if cli_args.get("videos_dir") is not None:
            config_dict["discovery"]["videos_dir"] = cli_args["videos_dir"]
        if cli_args.get("host") is not None:
            config_dict["server"]["host"] = cli_args["host"]
        if cli_args.get("port") is not None:
            config_dict["server"]["port"] = cli_args["port"]

        return AppConfig.from_dict(config_dict)


def postgres_url(
    host: str,
    port: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    dbname: Optional[str] = None,
) -> str:
    """Assemble a PostgreSQL URL from discrete connection parameters."""
    auth = ""
    if user:
        auth = f"{user}:{password}@" if password else f"{user}@"
    netloc = f"{host}:{port}" if port else host
    return f"postgresql://{auth}{netloc}/{dbname or ''}"
