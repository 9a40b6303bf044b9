"""Redis connection configuration: the canonical schema and its tooling.

Quick Start:
    from field_schema import resolve
    from redis_conn_config.connection import build_connection_spec
    from redis_conn_config.registry import REDIS_SCHEMA

    result = resolve(REDIS_SCHEMA, {"connectionType": "sentinel", ...})
    if result.ok:
        spec = build_connection_spec(result.config)
    else:
        for issue in result.errors:
            print(issue.path, issue.kind)
"""

__version__ = "0.1.0"
