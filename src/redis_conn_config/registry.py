"""Redis connection schema: single source of truth for every connection field.

Earlier credential definitions drifted between three near-identical field
lists. They are consolidated here into one canonical schema; older stored
records are upgraded by ``redis_conn_config.compat.migrate_values``.

Cross-field policy, expressed purely as visibility and requiredness:
- connectionType picks the host specification: host/port (standard),
  clusterHosts (cluster), sentinelHosts + masterName (sentinel)
- database only exists for standard and sentinel; Redis Cluster is db 0 only
- authType gates username (userpass) and password (password, userpass)
- ssl gates the whole sslOptions group
"""

from __future__ import annotations

from field_schema import FieldDescriptor, FieldType, OptionGroup, Schema, show_when

SCHEMA_NAME = "redis-connection"
SCHEMA_VERSION = "2.0"

CONNECTION_TYPES = ("standard", "cluster", "sentinel")
AUTH_TYPES = ("none", "password", "userpass")

DEFAULT_PORT = 6379
DEFAULT_SENTINEL_PORT = 26379

# Comma-separated host[:port] entries; whitespace around entries is allowed.
# Ports are limited to 1-65535.
_PORT = r"(?:6553[0-5]|655[0-2]\d|65[0-4]\d{2}|6[0-4]\d{3}|[1-5]\d{4}|[1-9]\d{0,3})"
_HOST_ENTRY = rf"\s*[^\s,:]+(?::{_PORT})?\s*"
HOST_LIST_PATTERN = rf"{_HOST_ENTRY}(?:,{_HOST_ENTRY})*"


def build_redis_schema() -> Schema:
    """Build the canonical Redis connection schema."""
    return Schema(
        name=SCHEMA_NAME,
        version=SCHEMA_VERSION,
        description="Connection settings for a Redis standalone, cluster or sentinel deployment",
        fields=(
            # =================================================================
            # Topology
            # =================================================================
            FieldDescriptor(
                name="connectionType",
                type=FieldType.STRING,
                default="standard",
                allowed_values=CONNECTION_TYPES,
                description="Type of Redis connection to establish",
            ),
            FieldDescriptor(
                name="host",
                type=FieldType.STRING,
                default="localhost",
                required=True,
                description="Redis server hostname or IP address",
                visible_when=show_when(connectionType="standard"),
            ),
            FieldDescriptor(
                name="port",
                type=FieldType.NUMBER,
                integer=True,
                default=DEFAULT_PORT,
                required=True,
                min_value=1,
                max_value=65535,
                description="Redis server port number",
                visible_when=show_when(connectionType="standard"),
            ),
            FieldDescriptor(
                name="clusterHosts",
                type=FieldType.STRING,
                required=True,
                pattern=HOST_LIST_PATTERN,
                description=(
                    "Comma-separated list of cluster host:port pairs,"
                    " e.g. localhost:6379,localhost:6380"
                ),
                visible_when=show_when(connectionType="cluster"),
            ),
            FieldDescriptor(
                name="sentinelHosts",
                type=FieldType.STRING,
                required=True,
                pattern=HOST_LIST_PATTERN,
                description=(
                    "Comma-separated list of sentinel host:port pairs,"
                    " e.g. localhost:26379,localhost:26380"
                ),
                visible_when=show_when(connectionType="sentinel"),
            ),
            FieldDescriptor(
                name="masterName",
                type=FieldType.STRING,
                required=True,
                description="Name of the Redis master instance in the Sentinel configuration",
                visible_when=show_when(connectionType="sentinel"),
            ),
            FieldDescriptor(
                name="database",
                type=FieldType.NUMBER,
                integer=True,
                default=0,
                min_value=0,
                max_value=15,
                description="Redis database number (0-15)",
                visible_when=show_when(connectionType=("standard", "sentinel")),
            ),
            # =================================================================
            # Authentication
            # =================================================================
            FieldDescriptor(
                name="authType",
                type=FieldType.STRING,
                default="none",
                allowed_values=AUTH_TYPES,
                description="Authentication method for the Redis connection",
            ),
            FieldDescriptor(
                name="username",
                type=FieldType.STRING,
                default="",
                required=True,
                description="Redis ACL username (Redis 6.0+)",
                visible_when=show_when(authType="userpass"),
            ),
            FieldDescriptor(
                name="password",
                type=FieldType.STRING,
                default="",
                required=True,
                secret=True,
                description="Redis password",
                visible_when=show_when(authType=("password", "userpass")),
            ),
            # =================================================================
            # TLS
            # =================================================================
            FieldDescriptor(
                name="ssl",
                type=FieldType.BOOLEAN,
                default=False,
                description="Whether to use SSL/TLS encryption for the connection",
            ),
            OptionGroup(
                name="sslOptions",
                description="TLS parameters, only considered when ssl is enabled",
                visible_when=show_when(ssl=True),
                fields=(
                    FieldDescriptor(
                        name="rejectUnauthorized",
                        type=FieldType.BOOLEAN,
                        default=True,
                        description="Whether to reject connections with invalid certificates",
                    ),
                    FieldDescriptor(
                        name="ca",
                        type=FieldType.STRING,
                        default="",
                        description="Certificate Authority certificate in PEM format",
                    ),
                    FieldDescriptor(
                        name="cert",
                        type=FieldType.STRING,
                        default="",
                        description="Client certificate in PEM format",
                    ),
                    FieldDescriptor(
                        name="key",
                        type=FieldType.STRING,
                        default="",
                        secret=True,
                        description="Client private key in PEM format",
                    ),
                ),
            ),
            # =================================================================
            # Connection tuning
            # =================================================================
            OptionGroup(
                name="connectionOptions",
                description="Timeouts, retries and socket behaviour",
                fields=(
                    FieldDescriptor(
                        name="connectTimeout",
                        type=FieldType.NUMBER,
                        integer=True,
                        default=10000,
                        min_value=0,
                        description="Connection timeout in milliseconds",
                    ),
                    FieldDescriptor(
                        name="commandTimeout",
                        type=FieldType.NUMBER,
                        integer=True,
                        default=5000,
                        min_value=0,
                        description="Command execution timeout in milliseconds",
                    ),
                    FieldDescriptor(
                        name="retryAttempts",
                        type=FieldType.NUMBER,
                        integer=True,
                        default=3,
                        min_value=0,
                        description="Number of retry attempts for failed connections",
                    ),
                    FieldDescriptor(
                        name="retryDelayOnFailover",
                        type=FieldType.NUMBER,
                        integer=True,
                        default=100,
                        min_value=0,
                        description="Delay between retry attempts in milliseconds",
                    ),
                    FieldDescriptor(
                        name="keepAlive",
                        type=FieldType.BOOLEAN,
                        default=True,
                        description="Enable TCP keep-alive",
                    ),
                    FieldDescriptor(
                        name="maxRetriesPerRequest",
                        type=FieldType.NUMBER,
                        integer=True,
                        default=3,
                        min_value=0,
                        description="Maximum number of retries per request",
                    ),
                ),
            ),
        ),
    )


REDIS_SCHEMA = build_redis_schema()
