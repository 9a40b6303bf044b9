"""Pytest configuration and fixtures for the connection schema tests."""

import pytest

from field_schema import FieldDescriptor, FieldType, OptionGroup, Schema, show_when
from redis_conn_config.registry import REDIS_SCHEMA


@pytest.fixture
def redis_schema() -> Schema:
    return REDIS_SCHEMA


@pytest.fixture
def toy_schema() -> Schema:
    """Small schema with a chained controller and a gated group."""
    return Schema(
        name="toy",
        version="1.0",
        fields=(
            FieldDescriptor(
                name="mode",
                type=FieldType.STRING,
                default="basic",
                allowed_values=("basic", "advanced"),
            ),
            FieldDescriptor(
                name="tuning",
                type=FieldType.BOOLEAN,
                default=False,
                visible_when=show_when(mode="advanced"),
            ),
            FieldDescriptor(
                name="depth",
                type=FieldType.NUMBER,
                required=True,
                min_value=1,
                max_value=10,
                visible_when=show_when(mode="advanced", tuning=True),
            ),
            OptionGroup(
                name="extras",
                visible_when=show_when(mode="advanced"),
                fields=(
                    FieldDescriptor(name="label", type=FieldType.STRING, default="x"),
                    FieldDescriptor(
                        name="token",
                        type=FieldType.STRING,
                        secret=True,
                        required=True,
                        visible_when=show_when(label="secure"),
                    ),
                ),
            ),
        ),
    )
