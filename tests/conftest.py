"""Shared fixtures: a small orders API used across unit and integration tests."""

from __future__ import annotations

from collections.abc import Generator
import copy
from pathlib import Path
from typing import Any

import pytest

from asyncapi_polyglot.core.settings import get_settings
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.validation.validator import ValidatedSpec, validate

ORDERS_DOCUMENT: dict[str, Any] = {
    "info": {
        "title": "Orders API",
        "version": "1.0.0",
        "description": "Order lifecycle events",
    },
    "channels": [
        {
            "address": "orders/{order_id}/created",
            "name": "orderCreated",
            "parameters": {"order_id": {"description": "Order identifier"}},
        },
        {"address": "orders/audit"},
    ],
    "operations": [
        {
            "operationId": "orderCreated",
            "action": "send",
            "channel": "orderCreated",
            "messages": ["OrderCreated"],
            "summary": "Announce a new order",
        },
        {
            "operationId": "auditOrder",
            "action": "send",
            "channel": "orders/audit",
        },
        {
            "operationId": "onOrderCreated",
            "action": "receive",
            "channel": "orderCreated",
            "messages": ["OrderCreated"],
        },
    ],
    "components": {
        "schemas": [
            {
                "name": "Order",
                "type": "object",
                "description": "A customer order",
                "required": ["id", "total"],
                "properties": [
                    {"name": "id", "type": "string", "format": "uuid"},
                    {"name": "total", "type": "number", "minimum": 0},
                    {"name": "note", "type": "string", "maxLength": 500},
                ],
            },
        ],
        "messages": [
            {"name": "OrderCreated", "payload": "Order"},
        ],
    },
}


@pytest.fixture
def orders_document() -> dict[str, Any]:
    """A fresh, mutable copy of the orders document."""
    return copy.deepcopy(ORDERS_DOCUMENT)


@pytest.fixture
def orders_spec(orders_document: dict[str, Any]) -> ApiSpec:
    return ApiSpec.from_yaml(orders_document)


@pytest.fixture
def validated_orders(orders_spec: ApiSpec) -> ValidatedSpec:
    return validate(orders_spec)


@pytest.fixture
def minimal_document() -> dict[str, Any]:
    """The smallest useful document: one channel, one send operation, one message."""
    return {
        "info": {"title": "Orders", "version": "1.0.0"},
        "channels": [{"address": "orders/created"}],
        "operations": [
            {
                "operationId": "orderCreated",
                "action": "send",
                "channel": "orders/created",
                "messages": ["OrderCreated"],
            }
        ],
        "components": {
            "schemas": [
                {
                    "name": "Order",
                    "type": "object",
                    "properties": [{"name": "id", "type": "string"}],
                }
            ],
            "messages": [{"name": "OrderCreated", "payload": "Order"}],
        },
    }


@pytest.fixture
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Isolate settings from the developer environment and any .env file."""
    for name in (
        "POLYGLOT_OUTPUT_DIR",
        "POLYGLOT_LANGUAGES",
        "POLYGLOT_MAX_WORKERS",
        "POLYGLOT_WRITE_TIMEOUT",
        "POLYGLOT_PUBLISH_TIMEOUT",
        "POLYGLOT_IDL_ID_MODE",
        "POLYGLOT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
