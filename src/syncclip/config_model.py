#!/usr/bin/env python3
"""Configuration aggregate exchanged with the engine.

The engine expects the whole configuration on every save, never a patch.
The aggregate is therefore an immutable value: an edit produces a new
snapshot via copy-and-replace, and the store swaps snapshots wholesale.

Wire keys a section does not model (the engine also keeps e.g. device_id,
db_path, wevdav_enabled) are kept in that section's ``extra`` mapping and
written back untouched, so saving a full snapshot never erases them.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Callable

DEFAULT_SERVER_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 5033
DEFAULT_REMOTE_HOST: str = "127.0.0.1"
DEFAULT_MAX_COUNT: int = 100
DEFAULT_LOG_RETENTION_DAYS: int = 7
DEFAULT_DEVICE_NAME: str = "Desktop"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_TRUE_WORDS = frozenset({"1", "true", "yes", "on", "y"})


class ConfigFieldError(KeyError):
    """An edit addressed a section or field that is not user-editable."""


def coerce_int(value: Any) -> int:
    """Coerce user input to an integer the way a numeric text box does.

    Takes the leading integer of text input ("80abc" -> 80); input with no
    leading digits becomes 0. Values are never rejected.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return bool(value)


def coerce_optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _split_extra(data: dict[str, Any], known: set[str]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


@dataclass(frozen=True)
class TlsConfig:
    cert: str
    key: str

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TlsConfig | None:
        if not data:
            return None
        return cls(cert=str(data.get("cert") or ""), key=str(data.get("key") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"cert": self.cert, "key": self.key}


@dataclass(frozen=True)
class ServerConfig:
    """Local sync server binding."""

    host: str = DEFAULT_SERVER_HOST
    port: int = DEFAULT_PORT
    tls: TlsConfig | None = None
    enabled: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServerConfig:
        return cls(
            host=str(data.get("host", DEFAULT_SERVER_HOST)),
            port=coerce_int(data.get("port", DEFAULT_PORT)),
            tls=TlsConfig.from_dict(data.get("tls")),
            enabled=bool(data.get("enabled", True)),
            extra=_split_extra(data, {"host", "port", "tls", "enabled"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "host": self.host,
            "port": self.port,
            "tls": self.tls.to_dict() if self.tls else None,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class ClientConfig:
    """Remote sync server this device pushes to."""

    enabled: bool = False
    remote_host: str = DEFAULT_REMOTE_HOST
    remote_port: int = DEFAULT_PORT
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        return cls(
            enabled=bool(data.get("enabled", False)),
            remote_host=str(data.get("remote_host", DEFAULT_REMOTE_HOST)),
            remote_port=coerce_int(data.get("remote_port", DEFAULT_PORT)),
            extra=_split_extra(data, {"enabled", "remote_host", "remote_port"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "enabled": self.enabled,
            "remote_host": self.remote_host,
            "remote_port": self.remote_port,
        }


@dataclass(frozen=True)
class AuthConfig:
    token: str | None = None
    encrypt_password: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthConfig:
        return cls(
            token=coerce_optional_str(data.get("token")),
            encrypt_password=coerce_optional_str(data.get("encrypt_password")),
            extra=_split_extra(data, {"token", "encrypt_password"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "token": self.token, "encrypt_password": self.encrypt_password}


@dataclass(frozen=True)
class HistoryConfig:
    max_count: int = DEFAULT_MAX_COUNT
    log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryConfig:
        return cls(
            max_count=coerce_int(data.get("max_count", DEFAULT_MAX_COUNT)),
            log_retention_days=coerce_int(
                data.get("log_retention_days", DEFAULT_LOG_RETENTION_DAYS)
            ),
            extra=_split_extra(data, {"max_count", "log_retention_days"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "max_count": self.max_count,
            "log_retention_days": self.log_retention_days,
        }


@dataclass(frozen=True)
class GeneralConfig:
    device_name: str = DEFAULT_DEVICE_NAME
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneralConfig:
        return cls(
            device_name=str(data.get("device_name", DEFAULT_DEVICE_NAME)),
            extra=_split_extra(data, {"device_name"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "device_name": self.device_name}


# User-editable fields per section and the coercion applied to input.
EDITABLE_FIELDS: dict[str, dict[str, Callable[[Any], Any]]] = {
    "server": {"host": str, "port": coerce_int, "enabled": coerce_bool},
    "client": {"enabled": coerce_bool, "remote_host": str, "remote_port": coerce_int},
    "auth": {"token": coerce_optional_str, "encrypt_password": coerce_optional_str},
    "history": {"max_count": coerce_int, "log_retention_days": coerce_int},
    "general": {"device_name": str},
}


@dataclass(frozen=True)
class Configuration:
    """The whole engine configuration as one value."""

    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    general: GeneralConfig = field(default_factory=GeneralConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Configuration:
        """Decode an engine snapshot; absent sections take the defaults."""
        return cls(
            server=ServerConfig.from_dict(data.get("server") or {}),
            client=ClientConfig.from_dict(data.get("client") or {}),
            auth=AuthConfig.from_dict(data.get("auth") or {}),
            history=HistoryConfig.from_dict(data.get("history") or {}),
            general=GeneralConfig.from_dict(data.get("general") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": self.server.to_dict(),
            "client": self.client.to_dict(),
            "auth": self.auth.to_dict(),
            "history": self.history.to_dict(),
            "general": self.general.to_dict(),
        }

    def with_field(self, section: str, field_name: str, value: Any) -> Configuration:
        """Return a copy with one field replaced.

        The value is coerced to the field's type, never rejected.

        Args:
            section: Section name, e.g. "server".
            field_name: Field within the section, e.g. "port".
            value: New value, typically raw user text.

        Returns:
            A new Configuration; self is unchanged.

        Raises:
            ConfigFieldError: If section.field is not user-editable.
        """
        fields = EDITABLE_FIELDS.get(section)
        if fields is None:
            raise ConfigFieldError(f"Unknown config section: {section}")
        coerce = fields.get(field_name)
        if coerce is None:
            raise ConfigFieldError(f"Unknown or read-only field: {section}.{field_name}")
        updated = dataclasses.replace(getattr(self, section), **{field_name: coerce(value)})
        return dataclasses.replace(self, **{section: updated})


def default_configuration() -> Configuration:
    """Placeholder aggregate shown until the engine's snapshot arrives."""
    return Configuration()
