"""Uplink dispatcher: raw payload bytes -> DecodedRecord."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from .packets import (
    ASYNCHRONOUS, EventStatus, StatusPayload, TYPE_CATEGORY, lookup_variant,
)

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Base class for payloads that cannot be decoded."""


class TruncatedPayload(DecodeError):
    """A variant's fixed layout needs more bytes than the payload has."""

    def __init__(self, variant: str, required: int, available: int):
        super().__init__(variant, required, available)
        self.variant = variant
        self.required = required
        self.available = available

    def __str__(self) -> str:
        return (f"{self.variant} packet needs {self.required} bytes, "
                f"got {self.available}")


@dataclass(frozen=True)
class DecodedRecord:
    port: int | None = None
    packet_type: int | None = None
    packet_subtype: int | None = None
    packet_type_info: str | None = None
    status_interpretation: Union[StatusPayload, str, None] = None
    date: str | None = None
    status_decoded: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.status_decoded

    def to_dict(self) -> dict[str, Any]:
        """Render with the key names used by network-server integrations."""
        if not self.status_decoded:
            return {"status_decoded": False}

        status = self.status_interpretation
        if status is not None and not isinstance(status, str):
            status = status.to_dict()

        out: dict[str, Any] = {
            "port": self.port,
            "packet_type": self.packet_type,
            "packet_subtype": self.packet_subtype,
            "packet_type_info": self.packet_type_info,
            "status_interpretation": status,
        }
        if self.packet_type_info == ASYNCHRONOUS:
            out["date"] = self.date
        return out


EMPTY_RECORD = DecodedRecord(status_decoded=False)


@dataclass
class DecodeResult:
    data: DecodedRecord
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data.to_dict(),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


def decode_uplink(data: Sequence[int] | None, f_port: int | None = 0,
                  variables: Mapping[str, Any] | None = None) -> DecodeResult:
    """Decode one uplink payload.

    *variables* (configured device variables) is accepted for interface
    compatibility and not used.  Empty or missing payloads return a record
    with ``status_decoded=False``.  Unknown types, subtypes and status codes
    produce a partially filled record.  Raises TruncatedPayload when the
    payload is shorter than the matched layout.
    """
    if not data:
        return DecodeResult(EMPTY_RECORD)

    packet_type = data[0] >> 4
    packet_subtype = data[0] & 0x0F
    category = TYPE_CATEGORY.get(packet_type)
    variant = lookup_variant(packet_type, packet_subtype)

    if category is None:
        logger.debug("unrecognised packet type 0x%X", packet_type)
    elif variant is None:
        logger.debug("unrecognised subtype 0x%X for packet type 0x%X",
                     packet_subtype, packet_type)

    status: Union[StatusPayload, str, None] = None
    date: str | None = None

    if variant is not None:
        if len(data) < variant.min_length:
            raise TruncatedPayload(variant.name, variant.min_length, len(data))

        payload = variant.decode(data)
        if isinstance(payload, EventStatus):
            date = payload.date
            status = payload.status
            if status is None:
                logger.debug("unrecognised AP1 status code 0x%02X",
                             payload.code)
        else:
            status = payload
        logger.debug("decoded %s packet (%d bytes)", variant.name, len(data))

    record = DecodedRecord(
        port=f_port,
        packet_type=packet_type,
        packet_subtype=packet_subtype,
        packet_type_info=category,
        status_interpretation=status,
        date=date,
    )
    return DecodeResult(record)


def encode_downlink(data: Mapping[str, Any] | None = None,
                    variables: Mapping[str, Any] | None = None) -> bytes:
    """Downlink encoding is not implemented; always returns no bytes."""
    return b""


class UplinkDecoder:
    """Decoder for a stream of uplinks that keeps simple counters.

    With ``strict=False`` truncated payloads do not raise; the result carries
    an empty record and the reason in ``errors``.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self.decoded: int = 0
        self.rejected: int = 0

    def feed(self, data: Sequence[int] | None, f_port: int | None = 0,
             variables: Mapping[str, Any] | None = None) -> DecodeResult:
        try:
            result = decode_uplink(data, f_port, variables)
        except TruncatedPayload as exc:
            self.rejected += 1
            if self.strict:
                raise
            logger.warning("dropping uplink on port %s: %s", f_port, exc)
            return DecodeResult(EMPTY_RECORD, errors=[str(exc)])

        self.decoded += 1
        return result

    def reset(self):
        """Clear counters."""
        self.decoded = 0
        self.rejected = 0
