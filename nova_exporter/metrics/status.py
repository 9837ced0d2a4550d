"""Nova server status to gauge ordinal mapping.

The table is fixed and total over the statuses Nova documents; anything else
maps to UNKNOWN_STATUS so one odd record never fails the server pass.
"""
from __future__ import annotations

from types import MappingProxyType

UNKNOWN_STATUS = -1

SERVER_STATUS_ORDINALS = MappingProxyType({
    "ACTIVE": 0,
    "BUILD": 1,
    "BUILD(spawning)": 2,
    "DELETED": 3,
    "ERROR": 4,
    "HARD_REBOOT": 5,
    "MIGRATING": 6,
    "PASSWORD": 7,
    "PAUSED": 8,
    "REBOOT": 9,
    "REBUILD": 10,
    "RESCUE": 11,
    "RESIZE": 12,
    "REVERT_RESIZE": 13,
    "SHELVED": 14,
    "SHELVED_OFFLOADED": 15,
    "SHUTOFF": 16,
    "SOFT_DELETED": 17,
    "SUSPENDED": 18,
    "UNKNOWN": 19,
    "VERIFY_RESIZE": 20,
})


def map_server_status(status: str) -> int:
    return SERVER_STATUS_ORDINALS.get(status, UNKNOWN_STATUS)


__all__ = ["SERVER_STATUS_ORDINALS", "UNKNOWN_STATUS", "map_server_status"]
