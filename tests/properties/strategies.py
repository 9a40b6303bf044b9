"""Hypothesis strategies for generating Redis value sets.

Value sets mix well-formed values, coercible strings, blanks and outright
garbage so resolution sees the same spread it gets from forms and env vars.
"""

from hypothesis import strategies as st

from redis_conn_config.registry import AUTH_TYPES, CONNECTION_TYPES

# =============================================================================
# SCALARS
# =============================================================================

blanks = st.sampled_from([None, "", "  "])

garbage = st.one_of(
    st.text(max_size=8),
    st.integers(min_value=-10, max_value=100_000),
    st.booleans(),
    st.lists(st.integers(), max_size=2),
)

hostnames = st.from_regex(r"[a-z][a-z0-9-]{0,10}", fullmatch=True)

ports = st.one_of(
    st.integers(min_value=1, max_value=65535),
    st.integers(min_value=1, max_value=65535).map(str),
)

booleans = st.one_of(st.booleans(), st.sampled_from(["true", "false", "yes", "no", "1", "0"]))


@st.composite
def host_lists(draw):
    entries = draw(
        st.lists(
            st.tuples(hostnames, st.none() | st.integers(min_value=1, max_value=65535)),
            min_size=1,
            max_size=4,
        )
    )
    return ",".join(host if port is None else f"{host}:{port}" for host, port in entries)


def maybe(strategy):
    """Sometimes the field is well-formed, sometimes blank, sometimes junk."""
    return st.one_of(strategy, blanks, garbage)


# =============================================================================
# VALUE SETS
# =============================================================================


@st.composite
def ssl_options(draw):
    keys = {
        "rejectUnauthorized": maybe(booleans),
        "ca": maybe(st.text(max_size=10)),
        "cert": maybe(st.text(max_size=10)),
        "key": maybe(st.text(max_size=10)),
    }
    return {k: draw(v) for k, v in keys.items() if draw(st.booleans())}


@st.composite
def connection_options(draw):
    keys = {
        "connectTimeout": maybe(st.integers(min_value=0, max_value=60_000)),
        "commandTimeout": maybe(st.integers(min_value=0, max_value=60_000)),
        "retryAttempts": maybe(st.integers(min_value=0, max_value=10)),
        "keepAlive": maybe(booleans),
    }
    return {k: draw(v) for k, v in keys.items() if draw(st.booleans())}


@st.composite
def redis_value_sets(draw):
    """Partial value sets for the Redis schema; any key may be absent."""
    candidates = {
        "connectionType": st.one_of(st.sampled_from(CONNECTION_TYPES), blanks, garbage),
        "host": maybe(hostnames),
        "port": maybe(ports),
        "clusterHosts": maybe(host_lists()),
        "sentinelHosts": maybe(host_lists()),
        "masterName": maybe(hostnames),
        "database": maybe(st.integers(min_value=0, max_value=15)),
        "authType": st.one_of(st.sampled_from(AUTH_TYPES), blanks, garbage),
        "username": maybe(hostnames),
        "password": maybe(st.text(min_size=1, max_size=12)),
        "ssl": maybe(booleans),
        "sslOptions": st.one_of(ssl_options(), garbage),
        "connectionOptions": connection_options(),
    }
    return {k: draw(v) for k, v in candidates.items() if draw(st.booleans())}


@st.composite
def well_formed_value_sets(draw):
    """Value sets that always resolve: every active required field is supplied."""
    connection_type = draw(st.sampled_from(CONNECTION_TYPES))
    auth_type = draw(st.sampled_from(AUTH_TYPES))
    values = {
        "connectionType": connection_type,
        "authType": auth_type,
        "ssl": draw(booleans),
        "connectionOptions": draw(
            st.fixed_dictionaries(
                {},
                optional={
                    "connectTimeout": st.integers(min_value=0, max_value=60_000),
                    "keepAlive": booleans,
                },
            )
        ),
    }
    if connection_type == "standard":
        values["host"] = draw(hostnames)
        values["port"] = draw(ports)
    elif connection_type == "cluster":
        values["clusterHosts"] = draw(host_lists())
    else:
        values["sentinelHosts"] = draw(host_lists())
        values["masterName"] = draw(hostnames)
    if auth_type == "userpass":
        values["username"] = draw(hostnames)
    if auth_type != "none":
        values["password"] = draw(st.text(min_size=1, max_size=12).filter(str.strip))
    return values
