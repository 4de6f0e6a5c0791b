"""nal-scanner: H.264 Annex-B NAL unit scanner with a bounded time budget."""

from nal_scanner.config import ScanConfig
from nal_scanner.nal_types import (
    H264NalType,
    H265NalType,
    format_nal_units,
    h264_nal_unit_type_string,
    h265_nal_unit_type_string,
)
from nal_scanner.scanner import (
    NOT_FOUND,
    NalUnit,
    ScanResult,
    StartCode,
    get_nal_unit_type,
    get_nal_units,
    get_nal_units_number,
    is_valid_nal_unit,
    scan_nal_units,
    search_nal_unit_by_type,
    search_nal_unit_start,
    start_code_prefix_size,
)

__all__ = [
    "H264NalType",
    "H265NalType",
    "NOT_FOUND",
    "NalUnit",
    "ScanConfig",
    "ScanResult",
    "StartCode",
    "format_nal_units",
    "get_nal_unit_type",
    "get_nal_units",
    "get_nal_units_number",
    "h264_nal_unit_type_string",
    "h265_nal_unit_type_string",
    "is_valid_nal_unit",
    "scan_nal_units",
    "search_nal_unit_by_type",
    "search_nal_unit_start",
    "start_code_prefix_size",
]
