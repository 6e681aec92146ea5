"""Packet layouts for the Easy Protect radio uplink.

Byte 0 of every uplink carries the packet type (high nibble) and subtype
(low nibble).  Each variant below has a fixed layout and a minimum length;
the decoders assume the caller has checked the length (see decoder.py).

Synchronous packets (schedule driven):
  SP1    daily, max. 2 retransmissions
  SP4    key-date report
  SP9.1  monthly except the month of first activation
  SP9.2  at activation and every 6 months (versions / identity)
  SP9.3  at activation and every 6 months (wM-Bus identity)

Asynchronous packets (event driven, max. 5 per month, no retransmission):
  AP1    status code + type G date
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Callable, Sequence, Union

from .primitives import (
    build_status_summary, decode_date, decode_date_and_time,
    get_2byte_value, get_3byte_value, get_4byte_value, get_be2_value,
    get_be4_value, hex_dotted, hex_str,
)


class PacketType(IntEnum):
    SP1 = 0x1
    SP4 = 0x4
    SP9 = 0x9
    AP1 = 0xA


class Sp9Subtype(IntEnum):
    MONTHLY = 0x1
    VERSIONS = 0x2
    IDENTITY = 0x3


SYNCHRONOUS = "synchronous"
ASYNCHRONOUS = "asynchronous"

# AP1 status codes (byte 1)
A_REMOVAL = 0x02
A_BATTERY_END_OF_LIFE = 0x0C
A_HORN_DRIVE_LEVEL_FAILURE = 0x16
A_OBSTRUCTION_DETECTION = 0x1A
A_OBJECT_IN_THE_SURROUNDING_AREA = 0x1C

AP_STATUS_LABELS = MappingProxyType({
    A_REMOVAL: "removal",
    A_BATTERY_END_OF_LIFE: "battery end of life",
    A_HORN_DRIVE_LEVEL_FAILURE: "horn drive level failure",
    A_OBSTRUCTION_DETECTION: "obstruction detection",
    A_OBJECT_IN_THE_SURROUNDING_AREA: "object in the surrounding area",
})

# Indexed by position in the SP9.1 status-summary bit string
STATUS_SUMMARY_LABELS: tuple[str, ...] = (
    "removal",
    "0",
    "battery end of life",
    "acoustic alarm failure",
    "obstruction detection",
    "surrounding area monitoring",
)


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DailyStatus:
    day_value: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class KeyDateStatus:
    date: str
    key_value: int
    summary: str
    reserved: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyStatus:
    date_time: str
    summary: tuple[str | None, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"dateTime": self.date_time, "summary": list(self.summary)}


@dataclass(frozen=True)
class VersionStatus:
    firmware_version: str
    lora_wan_version: str
    lora_command_version: str
    device_type: str
    meter_id: str
    reserved: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "firmware_version": self.firmware_version,
            "LoRa_WAN_version": self.lora_wan_version,
            "LoRa_command_version": self.lora_command_version,
            "device_type": self.device_type,
            "meter_ID": self.meter_id,
            "reserved": self.reserved,
        }


@dataclass(frozen=True)
class IdentityStatus:
    channel: str
    fabrication_number: str
    manufacturer: str
    fabrication_block: str
    device_medium: str
    obis: str
    vif_vife: str
    reserved: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EventStatus:
    """AP1 content: the event date plus the label (None for unknown codes)."""
    date: str
    code: int
    status: str | None


StatusPayload = Union[DailyStatus, KeyDateStatus, MonthlyStatus,
                      VersionStatus, IdentityStatus]


# ---------------------------------------------------------------------------
# Variant decoders
# ---------------------------------------------------------------------------

def decode_sp1(data: Sequence[int]) -> DailyStatus:
    return DailyStatus(day_value=get_4byte_value(1, data))


def decode_sp4(data: Sequence[int]) -> KeyDateStatus:
    # Day and month are sent as hex digits, no year.
    return KeyDateStatus(
        date=f"{hex_str(data[2])}.{hex_str(data[1])}.",
        key_value=get_4byte_value(3, data),
        summary=hex_str(get_2byte_value(7, data), upper=True),
        reserved=hex_str(get_2byte_value(9, data), upper=True),
    )


def decode_sp9_monthly(data: Sequence[int]) -> MonthlyStatus:
    return MonthlyStatus(
        date_time=decode_date_and_time(get_be4_value(1, data)),
        summary=tuple(build_status_summary(data[5], data[6],
                                           STATUS_SUMMARY_LABELS)),
    )


def decode_sp9_versions(data: Sequence[int]) -> VersionStatus:
    return VersionStatus(
        firmware_version=hex_dotted(data, 4, 3, 2, 1),
        lora_wan_version=hex_dotted(data, 7, 6, 5),
        lora_command_version=hex_dotted(data, 9, 8),
        device_type=hex_str(data[10]),
        meter_id=hex_str(get_4byte_value(11, data), upper=True),
        reserved=hex_str(get_2byte_value(17, data), upper=True),
    )


def decode_sp9_identity(data: Sequence[int]) -> IdentityStatus:
    return IdentityStatus(
        channel=hex_str(data[1]),
        fabrication_number=hex_str(get_4byte_value(2, data), upper=True),
        manufacturer=hex_dotted(data, 7, 6),
        fabrication_block=hex_str(data[8]),
        device_medium=hex_str(data[9]),
        obis=hex_str(data[10]),
        vif_vife=hex_str(get_3byte_value(11, data), upper=True),
        reserved=hex_str(get_3byte_value(14, data), upper=True),
    )


def decode_ap1(data: Sequence[int]) -> EventStatus:
    code = data[1]
    return EventStatus(
        date=decode_date(get_be2_value(3, data)),
        code=code,
        status=AP_STATUS_LABELS.get(code),
    )


@dataclass(frozen=True)
class Variant:
    name: str
    category: str
    min_length: int
    decode: Callable[[Sequence[int]], Any]


# subtype None matches any subtype of that packet type
VARIANTS: MappingProxyType[tuple[int, int | None], Variant] = MappingProxyType({
    (PacketType.SP1, None): Variant("SP1", SYNCHRONOUS, 5, decode_sp1),
    (PacketType.SP4, None): Variant("SP4", SYNCHRONOUS, 11, decode_sp4),
    (PacketType.SP9, Sp9Subtype.MONTHLY):
        Variant("SP9.1", SYNCHRONOUS, 7, decode_sp9_monthly),
    (PacketType.SP9, Sp9Subtype.VERSIONS):
        Variant("SP9.2", SYNCHRONOUS, 19, decode_sp9_versions),
    (PacketType.SP9, Sp9Subtype.IDENTITY):
        Variant("SP9.3", SYNCHRONOUS, 17, decode_sp9_identity),
    (PacketType.AP1, None): Variant("AP1", ASYNCHRONOUS, 5, decode_ap1),
})

# Category per packet type, also for subtypes without a layout
TYPE_CATEGORY = MappingProxyType({
    PacketType.SP1: SYNCHRONOUS,
    PacketType.SP4: SYNCHRONOUS,
    PacketType.SP9: SYNCHRONOUS,
    PacketType.AP1: ASYNCHRONOUS,
})


def lookup_variant(packet_type: int, packet_subtype: int) -> Variant | None:
    """Find the layout for a type/subtype pair, or None if there is none."""
    variant = VARIANTS.get((packet_type, packet_subtype))
    if variant is None:
        variant = VARIANTS.get((packet_type, None))
    return variant
