from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class NodeConfig(BaseModel):
    base_url: str = "http://localhost:8080"
    api_key: str | None = None
    connect_timeout_s: float = Field(30.0, gt=0.0)
    read_timeout_s: float = Field(30.0, gt=0.0)
    user_agent: str = "wallet-core"

    model_config = ConfigDict(extra="ignore")

    @field_validator("base_url")
    def _validate_base_url(cls, value: str) -> str:
        cleaned = value.strip().rstrip("/")
        if not cleaned.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return cleaned


class RetryConfig(BaseModel):
    max_attempts: int = Field(3, ge=1)
    delay_s: float = Field(0.5, ge=0.0)


class CacheConfig(BaseModel):
    enabled: bool = True
    short_ttl_s: float = Field(2.0, ge=0.0)
    long_ttl_s: float = Field(3600.0, ge=0.0)
    max_entries: int = Field(5000, ge=1)


class PagingConfig(BaseModel):
    max_page_size: int = Field(100, ge=1)
    default_page_size: int = Field(20, ge=1)
    reconcile_page_size: int = Field(100, ge=1)

    @model_validator(mode="after")
    def _default_within_max(self) -> "PagingConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size")
        return self


class WalletConfig(BaseModel):
    node: NodeConfig = Field(default_factory=NodeConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)

    model_config = ConfigDict(extra="ignore")


@dataclass
class LoadedConfig:
    path: Path | None
    data: WalletConfig


__all__ = [
    "NodeConfig",
    "RetryConfig",
    "CacheConfig",
    "PagingConfig",
    "WalletConfig",
    "LoadedConfig",
]
