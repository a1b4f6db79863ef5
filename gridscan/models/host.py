"""Host and scan progress models."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .classification import DeviceRole, classify
from .profile import service_name


class Host(BaseModel):
    """A single IPv4 endpoint with discovered and user-supplied attributes."""

    # camelCase keys only when dumping with by_alias (exports)
    model_config = ConfigDict(alias_generator=AliasGenerator(serialization_alias=to_camel))

    id: UUID = Field(default_factory=uuid4)
    ip_address: str

    # Discovered
    hostname: str | None = None
    open_ports: list[int] = Field(default_factory=list)

    # User labels, carried over between scans
    display_name: str | None = None
    notes: str | None = None

    # Status
    is_online: bool = False
    latency_ms: float | None = Field(default=None, ge=0)
    last_seen: datetime = Field(default_factory=datetime.now)

    # Recomputed every sweep, never persisted
    is_new: bool = Field(default=False, exclude=True)
    has_changed: bool = Field(default=False, exclude=True)

    @field_validator("open_ports")
    @classmethod
    def normalize_ports(cls, v: list[int]) -> list[int]:
        """Sort ports ascending and drop duplicates."""
        for port in v:
            if not 0 <= port <= 65535:
                raise ValueError(f"Port out of range: {port}")
        return sorted(set(v))

    @model_validator(mode="after")
    def sync_online(self) -> "Host":
        # Online exactly when something answered
        self.is_online = bool(self.open_ports)
        return self

    @property
    def title(self) -> str:
        """Return best available name for display."""
        return self.display_name or self.hostname or self.ip_address

    @property
    def device_type(self) -> str:
        return classify(self.open_ports, self.ip_address)[0]

    @property
    def role(self) -> DeviceRole:
        return classify(self.open_ports, self.ip_address)[1]

    @property
    def services(self) -> list[str]:
        """Well-known service names for the open ports."""
        return [name for name in (service_name(p) for p in self.open_ports) if name]

    @property
    def sort_key(self) -> tuple[int, ...]:
        """Numeric sort key for the address."""
        try:
            return tuple(int(part) for part in self.ip_address.split("."))
        except ValueError:
            return (256,)

    def stripped(self) -> "Host":
        """Return a copy with the transient flags cleared."""
        return self.model_copy(update={"is_new": False, "has_changed": False})


class ScanProgress(BaseModel):
    """Progress of the current sweep."""

    current: int = 0
    total: int = 0
    label: str = ""

    @property
    def fraction_completed(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.current / self.total
