#!/usr/bin/env python3
"""Pytest fixtures for syncclip tests.

Provides an in-memory fake engine implementing the command surface, a
loopback gateway that runs requests through the real codec and dispatcher
without sockets, and temporary socket paths for endpoint tests.
"""

from __future__ import annotations

import copy
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from loopback_engine import dispatch

from syncclip.gateway import CommandError, EngineAddress
from syncclip.protocol import decode_response, encode_request


def frame_content(frame: bytes) -> bytes:
    """Strip netstring framing from a complete frame."""
    return frame[frame.index(b":") + 1 : -1]


ENGINE_CONFIG: dict[str, Any] = {
    "server": {
        "enabled": True,
        "port": 5033,
        "host": "0.0.0.0",
        "wevdav_enabled": False,
        "tls": None,
    },
    "client": {"enabled": True, "remote_host": "192.168.1.20", "remote_port": 5033},
    "auth": {"username": None, "password": None, "token": "secret", "encrypt_password": None},
    "history": {"max_count": 100, "log_retention_days": 7, "db_path": "history.db"},
    "general": {"device_name": "workstation", "device_id": "3f1c0d6e-device"},
}


class FakeEngine:
    """In-memory engine with the same command semantics as the real one.

    History is returned pinned-first like the engine's SQL ordering, so
    clients must re-sort by id themselves. Commands listed in ``failures``
    raise with the given message.
    """

    def __init__(self) -> None:
        self.entries: dict[int, dict[str, Any]] = {}
        self.next_id = 1
        self.config: dict[str, Any] = copy.deepcopy(ENGINE_CONFIG)
        self.lan_devices: list[dict[str, Any]] = [
            {"name": "laptop", "ip": "192.168.1.31", "port": 5033},
        ]
        self.connected_clients: list[dict[str, Any]] = [
            {"name": "phone", "ip": "192.168.1.40", "port": 0, "last_active": 1700000000},
        ]
        self.network_info: dict[str, Any] = {
            "hostname": "workstation",
            "interfaces": [
                {"name": "enp3s0", "ip": "192.168.1.10", "is_physical": True},
                {"name": "docker0", "ip": "172.17.0.1", "is_physical": False},
            ],
        }
        self.update: str | None = None
        self.busy_ports: set[int] = set()
        self.failures: dict[str, str] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def add(
        self,
        content: str | None = "text",
        kind: str = "Text",
        file: str | None = None,
        pinned: bool = False,
        device: str | None = "laptop",
    ) -> int:
        entry_id = self.next_id
        self.next_id += 1
        self.entries[entry_id] = {
            "id": entry_id,
            "type": kind,
            "content": content,
            "html": None,
            "file": file,
            "device": device,
            "timestamp": f"2024-05-01 10:00:{entry_id:02d}",
            "pinned": pinned,
        }
        return entry_id

    def _check(self, command: str, args: dict[str, Any]) -> None:
        self.calls.append((command, args))
        if command in self.failures:
            raise RuntimeError(self.failures[command])

    async def get_history(self) -> list[dict[str, Any]]:
        self._check("get_history", {})
        rows = sorted(self.entries.values(), key=lambda e: (e["pinned"], e["id"]), reverse=True)
        return [dict(row) for row in rows]

    async def delete_history_item(self, id: int) -> None:
        self._check("delete_history_item", {"id": id})
        self.entries.pop(id, None)

    async def clear_history(self) -> None:
        self._check("clear_history", {})
        self.entries = {k: v for k, v in self.entries.items() if v["pinned"]}

    async def toggle_pin(self, id: int) -> None:
        self._check("toggle_pin", {"id": id})
        if id in self.entries:
            self.entries[id]["pinned"] = not self.entries[id]["pinned"]

    async def get_config(self) -> dict[str, Any]:
        self._check("get_config", {})
        return copy.deepcopy(self.config)

    async def save_config(self, config: dict[str, Any]) -> None:
        self._check("save_config", {"config": config})
        self.config = copy.deepcopy(config)

    async def check_port_available(self, port: int) -> bool:
        self._check("check_port_available", {"port": port})
        return port not in self.busy_ports

    async def find_available_port(self, start_port: int) -> int:
        self._check("find_available_port", {"start_port": start_port})
        port = start_port
        while port in self.busy_ports:
            port += 1
        return port

    async def get_network_info(self) -> dict[str, Any]:
        self._check("get_network_info", {})
        return copy.deepcopy(self.network_info)

    async def get_lan_devices(self) -> list[dict[str, Any]]:
        self._check("get_lan_devices", {})
        return copy.deepcopy(self.lan_devices)

    async def get_connected_clients(self) -> list[dict[str, Any]]:
        self._check("get_connected_clients", {})
        return copy.deepcopy(self.connected_clients)

    async def get_app_info(self) -> dict[str, Any]:
        self._check("get_app_info", {})
        return {
            "name": "SyncClipboard",
            "version": "0.1.0",
            "identifier": "com.syncclipboard.rs",
            "tauri_version": "2.9.5",
            "github_url": "https://github.com/SyncClipboard/sync_clipboard_rs",
            "license": "MIT",
        }

    async def get_dependencies(self) -> list[dict[str, Any]]:
        self._check("get_dependencies", {})
        return [{"name": "Tokio", "version": "1.43.0", "category": "Async Runtime"}]

    async def check_update(self) -> str | None:
        self._check("check_update", {})
        return self.update

    def handlers(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in (
                "get_history",
                "delete_history_item",
                "clear_history",
                "toggle_pin",
                "get_config",
                "save_config",
                "check_port_available",
                "find_available_port",
                "get_network_info",
                "get_lan_devices",
                "get_connected_clients",
                "get_app_info",
                "get_dependencies",
                "check_update",
            )
        }

    def command_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class LoopbackGateway:
    """Gateway that dispatches straight into a FakeEngine through the codec."""

    def __init__(self, engine: FakeEngine) -> None:
        self.engine = engine
        self.address = EngineAddress(socket_path="loopback")
        self.timeout = None

    async def call(self, command: str, args: dict[str, Any] | None = None) -> Any:
        request = frame_content(encode_request(command, args))
        response = await dispatch(self.engine.handlers(), request)
        ok, value = decode_response(frame_content(response))
        if not ok:
            raise CommandError(command, value)
        return value


@pytest.fixture
def engine() -> FakeEngine:
    """Create a fake engine with three history entries (id 2 pinned)."""
    fake = FakeEngine()
    fake.add("first")
    fake.add("second", pinned=True)
    fake.add(None, kind="Image", file="shot.png")
    return fake


@pytest.fixture
def gateway(engine: FakeEngine) -> LoopbackGateway:
    """Create a loopback gateway onto the engine fixture."""
    return LoopbackGateway(engine)


@pytest.fixture
def temp_socket_path(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary path for Unix domain socket testing."""
    socket_path = tmp_path / "engine.sock"
    yield socket_path
    if socket_path.exists():
        socket_path.unlink()
