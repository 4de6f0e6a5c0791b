"""NAL unit タイプ定義.

H.264 (Table 7-1) と H.265 (Table 7-1) の NAL unit type を
別々の IntEnum として定義する。スキャナが使うのは H.264 のみ。
"""

from collections.abc import Iterable
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nal_scanner.scanner import NalUnit


class H264NalType(IntEnum):
    """H.264 NAL unit type (5 bit)."""

    SLICE = 1
    DPA = 2
    DPB = 3
    DPC = 4
    IDR_SLICE = 5
    SEI = 6
    SPS = 7
    PPS = 8
    AUD = 9
    END_SEQUENCE = 10
    END_STREAM = 11
    FILLER_DATA = 12
    SPS_EXT = 13
    AUXILIARY_SLICE = 19
    STAP_A = 24  # RFC 3984 5.7.1
    STAP_B = 25  # 5.7.1
    MTAP16 = 26  # 5.7.2
    MTAP24 = 27  # 5.7.2
    FU_A = 28  # 5.8 fragmented unit
    FU_B = 29  # 5.8


class H265NalType(IntEnum):
    """H.265 NAL unit type (6 bit)."""

    TRAIL_N = 0
    TRAIL_R = 1
    TSA_N = 2
    TSA_R = 3
    STSA_N = 4
    STSA_R = 5
    RADL_N = 6
    RADL_R = 7
    RASL_N = 8
    RASL_R = 9
    BLA_W_LP = 16
    BLA_W_RADL = 17
    BLA_N_LP = 18
    IDR_W_RADL = 19
    IDR_N_LP = 20
    CRA_NUT = 21
    VPS = 32
    SPS = 33
    PPS = 34
    AUD = 35
    EOS_NUT = 36
    EOB_NUT = 37
    FD_NUT = 38
    SEI_PREFIX = 39
    SEI_SUFFIX = 40


_H264_LABELS = {t.value: f"NAL_{t.name}" for t in H264NalType}
_H265_LABELS = {t.value: f"NAL_{t.name}" for t in H265NalType}


def h264_nal_unit_type_string(nal_type: int) -> str:
    """H.264 NAL type の表示名を返す.

    未定義の値は "unknown - <値>" になる。
    """
    return _H264_LABELS.get(nal_type, f"unknown - {nal_type}")


def h265_nal_unit_type_string(nal_type: int) -> str:
    """H.265 NAL type の表示名を返す."""
    return _H265_LABELS.get(nal_type, f"unknown - {nal_type}")


def format_nal_units(units: "Iterable[NalUnit]") -> str:
    """NAL unit 一覧をログ用の 1 行にまとめる.

    例: "NAL_SPS (12 bytes), NAL_PPS (5 bytes)"
    """
    return ", ".join(
        f"{h264_nal_unit_type_string(nal.type)} ({nal.length} bytes)"
        for nal in units
    )
