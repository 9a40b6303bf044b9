"""Connection handoff: the typed record the connection factory consumes.

The factory that opens sockets, negotiates TLS and speaks RESP lives
elsewhere. This module only reshapes a resolved configuration into the
arguments that factory needs: parsed host lists, auth projected by authType,
TLS material only when TLS is on.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from field_schema import EffectiveConfiguration
from redis_conn_config.registry import DEFAULT_PORT, DEFAULT_SENTINEL_PORT, SCHEMA_NAME


class HostAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=1, le=65535)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class TLSSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    reject_unauthorized: bool = True
    ca: str | None = None
    cert: str | None = None
    key: str | None = None


class SocketSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    connect_timeout_ms: int
    command_timeout_ms: int
    keep_alive: bool
    retry_attempts: int
    retry_delay_ms: int
    max_retries_per_request: int


class ConnectionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    topology: Literal["standard", "cluster", "sentinel"]
    nodes: tuple[HostAddress, ...]
    master_name: str | None = None
    database: int | None = None
    username: str | None = None
    password: str | None = None
    tls: TLSSettings | None = None
    socket: SocketSettings

    def __repr__(self) -> str:
        masked = "'********'" if self.password else "None"
        return (
            f"ConnectionSpec(topology={self.topology!r}, "
            f"nodes=[{', '.join(str(n) for n in self.nodes)}], "
            f"database={self.database!r}, username={self.username!r}, password={masked}, "
            f"tls={'on' if self.tls else 'off'})"
        )


def parse_host_list(value: str, default_port: int = DEFAULT_PORT) -> list[HostAddress]:
    """Parse ``"a:6379, b, c:6381"`` into host addresses.

    Entries without a port get ``default_port``. Empty entries are skipped.
    """
    nodes: list[HostAddress] = []
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        host, sep, port = entry.partition(":")
        if not host:
            raise ValueError(f"Host entry '{entry}' has no hostname")
        if sep and not (port.isdigit() and 1 <= int(port) <= 65535):
            raise ValueError(f"Host entry '{entry}' has an invalid port")
        nodes.append(HostAddress(host=host, port=int(port) if sep else default_port))
    if not nodes:
        raise ValueError("Host list is empty")
    return nodes


def build_connection_spec(config: EffectiveConfiguration) -> ConnectionSpec:
    """Reshape a resolved Redis configuration for the connection factory."""
    if config.schema_name != SCHEMA_NAME:
        raise ValueError(
            f"Expected a '{SCHEMA_NAME}' configuration, got '{config.schema_name}'"
        )

    topology = config.get("connectionType")
    match topology:
        case "standard":
            nodes = [HostAddress(host=config.get("host"), port=int(config.get("port")))]
        case "cluster":
            nodes = parse_host_list(config.get("clusterHosts"), DEFAULT_PORT)
        case "sentinel":
            nodes = parse_host_list(config.get("sentinelHosts"), DEFAULT_SENTINEL_PORT)
        case _:
            raise ValueError(f"Unsupported connection type: {topology}")

    database = config.get("database")
    auth_type = config.get("authType")

    tls: TLSSettings | None = None
    if config.get("ssl"):
        tls = TLSSettings(
            reject_unauthorized=bool(config.get("sslOptions.rejectUnauthorized", True)),
            ca=config.get("sslOptions.ca") or None,
            cert=config.get("sslOptions.cert") or None,
            key=config.get("sslOptions.key") or None,
        )

    return ConnectionSpec(
        topology=topology,
        nodes=tuple(nodes),
        master_name=config.get("masterName") if topology == "sentinel" else None,
        database=int(database) if database is not None else None,
        username=config.get("username") if auth_type == "userpass" else None,
        password=config.get("password") if auth_type != "none" else None,
        tls=tls,
        socket=SocketSettings(
            connect_timeout_ms=int(config.get("connectionOptions.connectTimeout")),
            command_timeout_ms=int(config.get("connectionOptions.commandTimeout")),
            keep_alive=bool(config.get("connectionOptions.keepAlive")),
            retry_attempts=int(config.get("connectionOptions.retryAttempts")),
            retry_delay_ms=int(config.get("connectionOptions.retryDelayOnFailover")),
            max_retries_per_request=int(config.get("connectionOptions.maxRetriesPerRequest")),
        ),
    )
