#!/usr/bin/env python3
"""Value types exchanged with the engine.

Every type here is a disposable snapshot of server state: it is decoded
from a command response, displayed, and thrown away on the next fetch.
Nothing in this module is ever written back to the engine.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class EntryKind(enum.Enum):
    """Closed set of clipboard entry kinds."""

    TEXT = "Text"
    IMAGE = "Image"
    FILE = "File"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class HistoryEntry:
    """One clipboard history record.

    Attributes:
        id: Engine-assigned identifier, never reused; newest is highest.
        kind: Text, Image or File.
        content: Text payload, or a filename fallback for some File entries.
        file_ref: Name of the stored binary resource for Image/File entries.
        html: Rich-text rendition of the content, when the engine has one.
        device: Label of the device the entry came from.
        timestamp: Display string formatted by the engine; never parsed.
        pinned: Pinned entries survive a bulk clear.
    """

    id: int
    kind: EntryKind
    timestamp: str = ""
    content: str | None = None
    file_ref: str | None = None
    html: str | None = None
    device: str | None = None
    pinned: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Decode a wire record.

        Raises:
            ValueError: On an unknown kind or a non-integer id.
            KeyError: If id or type is missing.
        """
        return cls(
            id=int(data["id"]),
            kind=EntryKind(data["type"]),
            timestamp=str(data.get("timestamp") or ""),
            content=_optional_str(data.get("content")),
            file_ref=_optional_str(data.get("file")),
            html=_optional_str(data.get("html")),
            device=_optional_str(data.get("device")),
            pinned=bool(data.get("pinned") or False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "content": self.content,
            "html": self.html,
            "file": self.file_ref,
            "device": self.device,
            "timestamp": self.timestamp,
            "pinned": self.pinned,
        }


@dataclass(frozen=True)
class AdvertisedPeer:
    """A sync server discovered on the LAN; not necessarily connected."""

    name: str
    ip: str
    port: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdvertisedPeer:
        return cls(name=str(data["name"]), ip=str(data["ip"]), port=int(data["port"]))

    @property
    def address(self) -> str:
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True)
class ConnectedPeer:
    """A device with a recent session against the local server.

    Attributes:
        name: Device name, or the engine's fallback label.
        ip: Address the device connected from.
        last_active_at: Unix seconds of the last request, if known.
    """

    name: str
    ip: str
    last_active_at: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectedPeer:
        last_active = data.get("last_active")
        return cls(
            name=str(data["name"]),
            ip=str(data["ip"]),
            last_active_at=None if last_active is None else int(last_active),
        )


@dataclass(frozen=True)
class NetworkInterface:
    name: str
    ip: str
    is_physical: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkInterface:
        return cls(
            name=str(data["name"]),
            ip=str(data["ip"]),
            is_physical=bool(data.get("is_physical") or False),
        )


@dataclass(frozen=True)
class NetworkInfo:
    """Local machine hostname and its non-loopback interfaces."""

    hostname: str
    interfaces: list[NetworkInterface] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkInfo:
        return cls(
            hostname=str(data.get("hostname") or "Unknown"),
            interfaces=[NetworkInterface.from_dict(i) for i in data.get("interfaces") or []],
        )


@dataclass(frozen=True)
class AppInfo:
    name: str
    version: str
    identifier: str = ""
    engine_version: str = ""
    github_url: str = ""
    license: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppInfo:
        # Older engines report their UI runtime version as tauri_version.
        engine_version = data.get("engine_version", data.get("tauri_version", ""))
        return cls(
            name=str(data["name"]),
            version=str(data["version"]),
            identifier=str(data.get("identifier") or ""),
            engine_version=str(engine_version or ""),
            github_url=str(data.get("github_url") or ""),
            license=str(data.get("license") or ""),
        )


@dataclass(frozen=True)
class DependencyInfo:
    name: str
    version: str
    category: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DependencyInfo:
        return cls(
            name=str(data["name"]),
            version=str(data["version"]),
            category=str(data.get("category") or ""),
        )
