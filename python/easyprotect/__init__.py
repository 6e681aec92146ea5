"""easyprotect - Easy Protect LoRa uplink decoder and tooling."""

from .packets import PacketType, Sp9Subtype, AP_STATUS_LABELS, STATUS_SUMMARY_LABELS
from .decoder import (
    DecodedRecord, DecodeResult, DecodeError, TruncatedPayload,
    decode_uplink, encode_downlink, UplinkDecoder,
)
from .storage import LogWriter, LogReader, Uplink
from .capture import Capture, LiveCapture

__all__ = [
    "PacketType", "Sp9Subtype", "AP_STATUS_LABELS", "STATUS_SUMMARY_LABELS",
    "DecodedRecord", "DecodeResult", "DecodeError", "TruncatedPayload",
    "decode_uplink", "encode_downlink", "UplinkDecoder",
    "LogWriter", "LogReader", "Uplink",
    "Capture", "LiveCapture",
]
