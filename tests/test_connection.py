"""Unit tests for the connection factory handoff."""

import pytest
from pydantic import ValidationError

from field_schema import FieldDescriptor, FieldType, Schema, resolve
from redis_conn_config.connection import HostAddress, build_connection_spec, parse_host_list


def _spec(schema, values):
    return build_connection_spec(resolve(schema, values).unwrap())


class TestParseHostList:
    def test_default_port_applied(self):
        nodes = parse_host_list("a:7000, b ,c:7002", default_port=6379)
        assert [str(n) for n in nodes] == ["a:7000", "b:6379", "c:7002"]

    def test_empty_entries_skipped(self):
        assert parse_host_list("a,,b,") == [
            HostAddress(host="a", port=6379),
            HostAddress(host="b", port=6379),
        ]

    @pytest.mark.parametrize("value", ["", " , ", ":7000", "a:port", "a:99999", "a:7000,b:0"])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            parse_host_list(value)

    def test_port_bounds_on_model(self):
        with pytest.raises(ValidationError):
            HostAddress(host="a", port=0)
        with pytest.raises(ValidationError):
            HostAddress(host="a", port=65536)


class TestTopologies:
    def test_standard(self, redis_schema):
        spec = _spec(redis_schema, {"host": "cache", "port": "6380", "database": "1"})
        assert spec.topology == "standard"
        assert spec.nodes == (HostAddress(host="cache", port=6380),)
        assert spec.database == 1
        assert spec.master_name is None

    def test_cluster_has_no_database(self, redis_schema):
        spec = _spec(redis_schema, {"connectionType": "cluster", "clusterHosts": "n1:7000,n2"})
        assert [str(n) for n in spec.nodes] == ["n1:7000", "n2:6379"]
        assert spec.database is None

    def test_sentinel_uses_sentinel_port(self, redis_schema):
        spec = _spec(
            redis_schema,
            {"connectionType": "sentinel", "sentinelHosts": "s1", "masterName": "primary"},
        )
        assert spec.nodes == (HostAddress(host="s1", port=26379),)
        assert spec.master_name == "primary"
        assert spec.database == 0


class TestAuthAndTLS:
    def test_none_drops_credentials(self, redis_schema):
        spec = _spec(redis_schema, {"authType": "none", "password": "leftover"})
        assert spec.username is None
        assert spec.password is None

    def test_password_only(self, redis_schema):
        spec = _spec(redis_schema, {"authType": "password", "password": "pw"})
        assert spec.username is None
        assert spec.password == "pw"

    def test_userpass(self, redis_schema):
        spec = _spec(redis_schema, {"authType": "userpass", "username": "u", "password": "pw"})
        assert (spec.username, spec.password) == ("u", "pw")

    def test_tls_off(self, redis_schema):
        assert _spec(redis_schema, {"ssl": "false"}).tls is None

    def test_tls_on_blank_material_is_none(self, redis_schema):
        spec = _spec(
            redis_schema,
            {"ssl": "true", "sslOptions": {"rejectUnauthorized": "false", "ca": "CA-PEM"}},
        )
        assert spec.tls is not None
        assert spec.tls.reject_unauthorized is False
        assert spec.tls.ca == "CA-PEM"
        assert spec.tls.cert is None
        assert spec.tls.key is None

    def test_repr_masks_password(self, redis_schema):
        spec = _spec(redis_schema, {"authType": "password", "password": "hunter2"})
        assert "hunter2" not in repr(spec)


class TestSocketSettings:
    def test_defaults(self, redis_schema):
        socket = _spec(redis_schema, {}).socket
        assert socket.connect_timeout_ms == 10000
        assert socket.command_timeout_ms == 5000
        assert socket.retry_attempts == 3
        assert socket.keep_alive is True

    def test_overrides(self, redis_schema):
        socket = _spec(redis_schema, {"connectionOptions": {"retryAttempts": "0"}}).socket
        assert socket.retry_attempts == 0


class TestForeignConfiguration:
    def test_other_schema_rejected(self):
        other = Schema(
            name="memcached",
            version="1.0",
            fields=(FieldDescriptor(name="host", type=FieldType.STRING, default="x"),),
        )
        with pytest.raises(ValueError, match="redis-connection"):
            build_connection_spec(resolve(other, {}).unwrap())
