"""Uplink to downlink topic mapping."""

from __future__ import annotations

from .. import constants
from .errors import RouteError


def downlink_topic(uplink_topic: str) -> str:
    """Swap the trailing ``up`` of an uplink topic for ``down``."""

    if not uplink_topic.endswith(constants.UPLINK_SUFFIX):
        raise RouteError(f"invalid uplink topic: {uplink_topic!r}")

    prefix = uplink_topic[: -len(constants.UPLINK_SUFFIX)]
    return prefix + constants.DOWNLINK_SUFFIX
