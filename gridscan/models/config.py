"""Configuration models using Pydantic for validation."""

import ipaddress
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .profile import ScanProfile


class ScannerConfig(BaseModel):
    """Sweep and probe tuning."""

    concurrency_limit: int = Field(default=64, ge=1)
    probe_timeout_seconds: float = 0.6  # Hard upper bound per connection attempt
    dns_timeout_seconds: float = 1.0  # Timeout for reverse lookups (0.5-2.0 recommended)
    persist_every: int = Field(default=8, ge=1)  # Save after this many completed probes
    default_profile: ScanProfile = ScanProfile.QUICK
    fallback_range: str = "192.168.1.0/24"  # Used when no interface can be detected

    @field_validator("probe_timeout_seconds", "dns_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeouts are positive and reasonably short."""
        if not 0 < v <= 10:
            raise ValueError(f"Timeout must be between 0 and 10 seconds, got {v}")
        return v

    @field_validator("fallback_range")
    @classmethod
    def validate_cidr(cls, v: str) -> str:
        """Validate that range is an IPv4 CIDR with usable hosts."""
        try:
            network = ipaddress.IPv4Network(v, strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid CIDR range '{v}': {e}")
        if network.prefixlen > 30:
            raise ValueError(f"CIDR range '{v}' has no usable host addresses")
        return v


class StorageConfig(BaseModel):
    """Where hosts and exports are written."""

    hosts_path: Path = Path("hosts.json")
    export_dir: Path = Path("exports")


class Settings(BaseModel):
    """General application settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class Config(BaseModel):
    """Main configuration model."""

    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    settings: Settings = Field(default_factory=Settings)

    @classmethod
    def load(cls, path: Path | str = "config.json") -> "Config":
        """Load configuration from a JSON file."""
        import json

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path | str = "config.json") -> "Config":
        """Load configuration or return default if file doesn't exist."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            return cls()
