"""nal_types モジュールのテスト."""

from nal_scanner.nal_types import (
    H264NalType,
    H265NalType,
    format_nal_units,
    h264_nal_unit_type_string,
    h265_nal_unit_type_string,
)
from nal_scanner.scanner import NalUnit


def test_h264_type_strings():
    assert h264_nal_unit_type_string(1) == "NAL_SLICE"
    assert h264_nal_unit_type_string(5) == "NAL_IDR_SLICE"
    assert h264_nal_unit_type_string(7) == "NAL_SPS"
    assert h264_nal_unit_type_string(8) == "NAL_PPS"
    assert h264_nal_unit_type_string(24) == "NAL_STAP_A"
    assert h264_nal_unit_type_string(28) == "NAL_FU_A"


def test_h264_type_strings_cover_all_constants():
    for nal_type in H264NalType:
        assert h264_nal_unit_type_string(nal_type) == f"NAL_{nal_type.name}"


def test_h264_unknown_type():
    """未定義の値は数値付きの unknown."""
    assert h264_nal_unit_type_string(0) == "unknown - 0"
    assert h264_nal_unit_type_string(14) == "unknown - 14"
    assert h264_nal_unit_type_string(31) == "unknown - 31"


def test_h265_type_strings():
    assert h265_nal_unit_type_string(0) == "NAL_TRAIL_N"
    assert h265_nal_unit_type_string(19) == "NAL_IDR_W_RADL"
    assert h265_nal_unit_type_string(32) == "NAL_VPS"
    assert h265_nal_unit_type_string(40) == "NAL_SEI_SUFFIX"
    assert h265_nal_unit_type_string(10) == "unknown - 10"


def test_type_tables_are_separate():
    """H.264 と H.265 で同じ値でも別の意味."""
    assert H264NalType(7) is H264NalType.SPS
    assert H265NalType(7) is H265NalType.RADL_R
    assert H265NalType.SPS == 33


def test_format_nal_units():
    units = [NalUnit(7, 0, 12), NalUnit(8, 12, 5), NalUnit(0, 17, 3)]
    assert format_nal_units(units) == (
        "NAL_SPS (12 bytes), NAL_PPS (5 bytes), unknown - 0 (3 bytes)"
    )


def test_format_nal_units_empty():
    assert format_nal_units([]) == ""
