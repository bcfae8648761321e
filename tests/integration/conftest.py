"""Fixtures for end-to-end pipeline runs."""

from __future__ import annotations

from collections.abc import Iterator
import importlib
from pathlib import Path
import sys
from types import ModuleType
from typing import Any

import pytest

from asyncapi_polyglot.generators import GeneratorOptions, Language
from asyncapi_polyglot.pipeline import Pipeline
from asyncapi_polyglot.spec import ApiSpec

WRITE_TIMEOUT = 10.0


def order_events() -> dict[str, Any]:
    """One channel, one event message, one schema and one send operation."""
    return {
        "info": {"title": "Order Events", "version": "2.1.0"},
        "channels": [{"address": "orders/created"}],
        "operations": [
            {
                "operationId": "publish_order_created",
                "action": "send",
                "channel": "orders/created",
                "messages": ["order_created_event"],
            }
        ],
        "components": {
            "schemas": [
                {
                    "name": "OrderEventSchema",
                    "type": "object",
                    "properties": [
                        {"name": "id", "type": "string"},
                        {"name": "total", "type": "number"},
                    ],
                    "required": ["id"],
                }
            ],
            "messages": [{"name": "order_created_event", "payload": "OrderEventSchema"}],
        },
    }


@pytest.fixture
def order_event_document() -> dict[str, Any]:
    return order_events()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "generated"


@pytest.fixture
def pipeline(output_dir: Path) -> Pipeline:
    return Pipeline(output_dir, GeneratorOptions(), max_workers=4, write_timeout=WRITE_TIMEOUT)


@pytest.fixture(scope="module")
def python_client(tmp_path_factory: pytest.TempPathFactory) -> Iterator[tuple[Path, ModuleType]]:
    """Generate the Python client of the order document and import it."""
    pytest.importorskip("capnp")
    pytest.importorskip("nats")
    output = tmp_path_factory.mktemp("python_client")
    options = GeneratorOptions(languages=(Language.PYTHON,))
    Pipeline(output, options, write_timeout=WRITE_TIMEOUT).run(
        ApiSpec.from_yaml(order_events())
    )

    sys.path.insert(0, str(output / "python"))
    try:
        yield output, importlib.import_module("order_events")
    finally:
        sys.path.remove(str(output / "python"))
        for name in [name for name in sys.modules if name.partition(".")[0] == "order_events"]:
            del sys.modules[name]
