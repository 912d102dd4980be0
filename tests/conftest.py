import base64
import json
from typing import Any, Callable

import pytest


@pytest.fixture
def make_uplink() -> Callable[..., bytes]:
    """Build a network-server uplink envelope around raw device bytes."""

    def factory(payload: bytes | str, *, port: int = 1, **metadata: Any) -> bytes:
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        document = {
            "port": port,
            "payload": base64.b64encode(payload).decode("ascii"),
            **metadata,
        }
        return json.dumps(document).encode("utf-8")

    return factory
