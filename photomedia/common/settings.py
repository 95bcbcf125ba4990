# photomedia/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 2342
    prefix: str = "/api/v1"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False


class DBConfig(BaseModel):
    echo: bool = False
    create_schema: bool = True
    # If unset, a SQLite file under data_root is used (see Settings.database_url)
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "database_url", "url"),
    )


class ThumbsConfig(BaseModel):
    # width * height ceiling for a single request (decompression-bomb guard)
    max_pixels: int = Field(4096 * 4096, ge=1)
    jpeg_quality: int = Field(90, ge=1, le=100)
    workers: int = Field(4, ge=1, le=64, description="Concurrent decode/encode jobs")
    generation_timeout_sec: float = Field(30.0, gt=0)
    # Capacity for the background sweep; None disables size-based eviction
    cache_max_bytes: Optional[int] = Field(None, ge=0)
    # Empty token disables the check
    preview_token: str = ""
    download_token: str = ""


class FeatureFlags(BaseModel):
    backup_yaml: bool = True
    reconcile_on_startup: bool = True

    @field_validator("*", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "photomedia"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Paths & layout --------
    data_root: Path = Path("/srv/photomedia")
    originals_subdir: str = "originals"
    cache_subdir: str = "cache/thumbnails"
    sidecar_subdir: str = "sidecar"

    originals_root_override: Optional[Path] = Field(default=None, alias="ORIGINALS_ROOT")
    cache_root_override: Optional[Path] = Field(default=None, alias="THUMB_CACHE_ROOT")

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    db: DBConfig = DBConfig()
    thumbs: ThumbsConfig = ThumbsConfig()
    features: FeatureFlags = FeatureFlags()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # ===== Derived paths =====
    @computed_field  # type: ignore[misc]
    @property
    def originals_root(self) -> Path:
        if self.originals_root_override:
            return Path(self.originals_root_override)
        return self.data_root / self.originals_subdir

    @computed_field  # type: ignore[misc]
    @property
    def cache_root(self) -> Path:
        if self.cache_root_override:
            return Path(self.cache_root_override)
        return self.data_root / self.cache_subdir

    @computed_field  # type: ignore[misc]
    @property
    def sidecar_root(self) -> Path:
        return self.data_root / self.sidecar_subdir

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        if self.db.url:
            return self.db.url
        return f"sqlite:///{self.data_root / 'index.db'}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Only the API wiring should call this;
    thumbnail components take their values as constructor arguments.
        from photomedia.common.settings import get_settings
        cfg = get_settings()
    """
    s = Settings()  # pydantic_settings will read from .env automatically
    if s.app_env in ("development", "test"):
        for p in (s.data_root, s.originals_root, s.cache_root, s.sidecar_root):
            p.mkdir(parents=True, exist_ok=True)
    return s
