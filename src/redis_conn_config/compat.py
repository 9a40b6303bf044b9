"""Backward compatibility: legacy credential records and REDIS_* environment variables.

Schema version history:
- 1.0: flat built-in credential {host, port, ssl, database, user, password};
  standalone only, authentication implied by which secrets are present
- 2.0: canonical schema with connection topology, explicit authType and the
  sslOptions / connectionOptions groups

Everything here produces a plain value set for the canonical schema. Values
stay raw; coercion happens during resolution.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from packaging.version import Version
from pydantic import BaseModel

from field_schema import Schema, is_blank, resolve
from redis_conn_config.registry import REDIS_SCHEMA, SCHEMA_VERSION

LEGACY_SCHEMA_VERSION = "1.0"

# Environment variable name → value-set path
ENV_VAR_TO_PATH: dict[str, str] = {
    "REDIS_CONNECTION_TYPE": "connectionType",
    "REDIS_HOST": "host",
    "REDIS_PORT": "port",
    "REDIS_CLUSTER_HOSTS": "clusterHosts",
    "REDIS_SENTINEL_HOSTS": "sentinelHosts",
    "REDIS_MASTER_NAME": "masterName",
    "REDIS_DATABASE": "database",
    "REDIS_AUTH_TYPE": "authType",
    "REDIS_USERNAME": "username",
    "REDIS_PASSWORD": "password",
    "REDIS_SSL": "ssl",
    "REDIS_SSL_REJECT_UNAUTHORIZED": "sslOptions.rejectUnauthorized",
    "REDIS_SSL_CA": "sslOptions.ca",
    "REDIS_SSL_CERT": "sslOptions.cert",
    "REDIS_SSL_KEY": "sslOptions.key",
    "REDIS_CONNECT_TIMEOUT": "connectionOptions.connectTimeout",
    "REDIS_COMMAND_TIMEOUT": "connectionOptions.commandTimeout",
    "REDIS_RETRY_ATTEMPTS": "connectionOptions.retryAttempts",
    "REDIS_RETRY_DELAY_ON_FAILOVER": "connectionOptions.retryDelayOnFailover",
    "REDIS_KEEP_ALIVE": "connectionOptions.keepAlive",
    "REDIS_MAX_RETRIES_PER_REQUEST": "connectionOptions.maxRetriesPerRequest",
}


class UnknownSchemaVersionError(ValueError):
    def __init__(self, version: str) -> None:
        super().__init__(
            f"Unknown schema version '{version}'. "
            f"Known: {LEGACY_SCHEMA_VERSION}, {SCHEMA_VERSION}"
        )


class RedundantEnvVar(BaseModel):
    """An environment variable whose value matches the schema default."""

    env_var: str
    path: str
    value: str
    default: str


def set_path(values: dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at a dotted path, creating intermediate group dicts."""
    *parents, leaf = path.split(".")
    node = values
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[leaf] = value


def from_builtin_credential(record: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a flat 1.0 credential record into a canonical value set.

    The authentication mode is inferred: a user means userpass, a password
    alone means password, neither means none.
    """
    user = record.get("user")
    password = record.get("password")
    if not is_blank(user):
        auth_type = "userpass"
    elif not is_blank(password):
        auth_type = "password"
    else:
        auth_type = "none"

    values: dict[str, Any] = {"connectionType": "standard", "authType": auth_type}
    for key in ("host", "port", "database", "ssl"):
        if key in record:
            values[key] = record[key]
    if auth_type == "userpass":
        values["username"] = user
    if auth_type != "none":
        values["password"] = password
    return values


def migrate_values(values: Mapping[str, Any], from_version: str) -> dict[str, Any]:
    """Upgrade a stored value set to the current schema version."""
    try:
        version = Version(from_version)
    except ValueError:
        raise UnknownSchemaVersionError(from_version) from None

    if version == Version(SCHEMA_VERSION):
        return dict(values)
    if version == Version(LEGACY_SCHEMA_VERSION):
        return from_builtin_credential(values)
    raise UnknownSchemaVersionError(from_version)


def env_to_values(env_vars: Mapping[str, str]) -> dict[str, Any]:
    """Build a value set from REDIS_* environment variables.

    Unknown variables are silently ignored (they may belong to something else).
    """
    values: dict[str, Any] = {}
    for env_name, raw_value in env_vars.items():
        path = ENV_VAR_TO_PATH.get(env_name)
        if path is None:
            continue
        set_path(values, path, raw_value)
    return values


def find_redundant_env_vars(
    env_vars: Mapping[str, str],
    schema: Schema = REDIS_SCHEMA,
) -> list[RedundantEnvVar]:
    """Identify env vars whose resolved value equals the schema default."""
    result = resolve(schema, env_to_values(env_vars))
    if not result.ok or result.config is None:
        return []

    redundant: list[RedundantEnvVar] = []
    for env_name, raw_value in env_vars.items():
        path = ENV_VAR_TO_PATH.get(env_name)
        if path is None:
            continue
        resolved = result.config.field(path)
        descriptor = schema.get(path)
        if resolved is None or descriptor is None or resolved.source != "supplied":
            continue
        if resolved.value == descriptor.default and isinstance(resolved.value, bool) == isinstance(
            descriptor.default, bool
        ):
            redundant.append(
                RedundantEnvVar(
                    env_var=env_name,
                    path=path,
                    value=raw_value,
                    default=str(descriptor.default),
                )
            )
    return redundant
