"""H.264 Annex-B NAL unit スキャナ.

バイトバッファの (offset, length) ウィンドウから start code
(0x00 0x00 0x01 / 0x00 0x00 0x00 0x01) を探し、NAL unit の
タイプと範囲を列挙する。

バッファはコピーも保持もしない。呼び出し間で状態を持たないため、
呼び出しごとに別の出力リストを渡せば複数スレッドから同時に使える。
不正な入力は例外ではなく番兵値 (-1, False, 0 件) で返す。
"""

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from nal_scanner.config import ScanConfig
from nal_scanner.nal_types import format_nal_units, h264_nal_unit_type_string

logger = logging.getLogger(__name__)

NAL_PREFIX_4 = b"\x00\x00\x00\x01"
NAL_PREFIX_3 = b"\x00\x00\x01"

NOT_FOUND = -1

NAL_TYPE_MASK = 0x1F


class StartCode(NamedTuple):
    """start code の位置 (バッファ先頭からの絶対位置) と長さ (3 or 4)."""

    offset: int
    prefix_size: int

    @property
    def found(self) -> bool:
        return self.offset >= 0


NO_START_CODE = StartCode(NOT_FOUND, NOT_FOUND)


@dataclass(frozen=True)
class NalUnit:
    """列挙された NAL unit.

    Attributes:
        type: NAL unit type (0-31)
        offset: start code の位置 (ウィンドウではなくバッファ先頭から)
        length: start code から次の start code の直前 (またはウィンドウ末尾) までのバイト数
    """

    type: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def type_name(self) -> str:
        return h264_nal_unit_type_string(self.type)


@dataclass
class ScanResult:
    """列挙結果.

    degraded が True の場合は時間制限で打ち切られており、
    units は途中までの結果。呼び出し側はソフトな失敗として扱う。
    """

    units: list[NalUnit] = field(default_factory=list)
    degraded: bool = False

    @property
    def count(self) -> int:
        return len(self.units)


class _Watchdog:
    """壁時計ベースの処理時間制限."""

    def __init__(self, config: ScanConfig):
        self._clock = config.clock
        self._budget = config.time_budget_ms / 1000.0
        self._started = self._clock()

    def expired(self) -> bool:
        return self._clock() - self._started > self._budget


def _window_end(data: bytes, offset: int, length: int | None) -> int:
    if length is None:
        return len(data)
    return min(offset + length, len(data))


def start_code_prefix_size(data: bytes, offset: int, length: int) -> int:
    """offset から始まる start code の長さを返す.

    Args:
        data: 入力バッファ
        offset: 判定位置
        length: offset から読んでよい残りバイト数

    Returns:
        4 (00 00 00 01)、3 (00 00 01)、または -1。残りが 4 バイト未満なら -1。
    """
    if length < len(NAL_PREFIX_4):
        return NOT_FOUND
    if data[offset : offset + 4] == NAL_PREFIX_4:
        return len(NAL_PREFIX_4)
    if data[offset : offset + 3] == NAL_PREFIX_3:
        return len(NAL_PREFIX_3)
    return NOT_FOUND


def search_nal_unit_start(data: bytes, offset: int, length: int) -> StartCode:
    """offset 以降で最初の start code を探す.

    バッファ末尾まで 4 バイト未満しか残っていない場合は、
    length の値に関係なく即座に NO_START_CODE を返す。

    Returns:
        見つかった start code。なければ NO_START_CODE。
    """
    if offset < 0 or offset >= len(data) - 3:
        return NO_START_CODE
    end = _window_end(data, offset, length)

    # 00 00 01 の最初の出現位置を探し、直前が 00 なら 4-byte start code
    idx = data.find(NAL_PREFIX_3, offset, end)
    if idx < 0:
        return NO_START_CODE
    pos = idx - 1 if idx > offset and data[idx - 1] == 0 else idx

    prefix = start_code_prefix_size(data, pos, end - pos)
    if prefix < 0 or pos + prefix >= end:
        # ウィンドウ末尾の start code の後に NAL header がない
        return NO_START_CODE
    return StartCode(pos, prefix)


def scan_nal_units(
    data: bytes | None,
    offset: int = 0,
    length: int | None = None,
    *,
    config: ScanConfig | None = None,
) -> ScanResult:
    """ウィンドウ内の NAL unit をすべて列挙する.

    各 unit は start code から次の start code の直前までを占め、
    最後の unit はウィンドウ末尾まで伸びる。最初の start code より
    前のバイトはどの unit にも含まれない。

    処理時間が config.time_budget_ms を超えた場合は WARNING を出して
    打ち切り、それまでの結果を degraded=True で返す。

    Args:
        data: Annex-B バイトバッファ
        offset: ウィンドウ開始位置
        length: ウィンドウ長 (None ならバッファ末尾まで)
        config: スキャン設定

    Returns:
        ScanResult
    """
    config = config or ScanConfig()
    result = ScanResult()
    if data is None or offset < 0:
        return result

    window_end = _window_end(data, offset, length)
    watchdog = _Watchdog(config)
    debug = logger.isEnabledFor(logging.DEBUG)
    pos = offset

    while True:
        start = search_nal_unit_start(data, pos, window_end - pos)
        if not start.found:
            break

        header = start.offset + start.prefix_size
        nal_type = data[header] & NAL_TYPE_MASK

        # 次の start code までがこの unit
        following = search_nal_unit_start(data, header, window_end - header)
        unit_end = following.offset if following.found else window_end

        nal = NalUnit(nal_type, start.offset, unit_end - start.offset)
        result.units.append(nal)
        if debug:
            logger.debug(
                "NAL unit type: %s (%d) - %d bytes, offset %d",
                nal.type_name,
                nal.type,
                nal.length,
                nal.offset,
            )

        if not following.found:
            break
        pos = unit_end

        if watchdog.expired():
            logger.warning(
                "Cannot process data within %d msec in %d bytes",
                config.time_budget_ms,
                window_end - offset,
            )
            result.degraded = True
            break

    if debug and result.units:
        logger.debug("NALs (%d): %s", result.count, format_nal_units(result.units))
    return result


def get_nal_units(
    data: bytes | None,
    offset: int,
    length: int,
    found_nals: list[NalUnit],
    *,
    config: ScanConfig | None = None,
) -> int:
    """found_nals をクリアして列挙結果を詰め、見つかった件数を返す."""
    found_nals.clear()
    result = scan_nal_units(data, offset, length, config=config)
    found_nals.extend(result.units)
    return result.count


def get_nal_units_number(
    data: bytes | None,
    offset: int,
    length: int,
    *,
    config: ScanConfig | None = None,
) -> int:
    """ウィンドウ内の NAL unit 数を返す."""
    return scan_nal_units(data, offset, length, config=config).count


def search_nal_unit_by_type(
    data: bytes | None,
    offset: int,
    length: int,
    unit_type: int,
    *,
    config: ScanConfig | None = None,
) -> int:
    """指定タイプの最初の NAL unit を探す.

    一致しない unit は読み飛ばし、その NAL header の位置から探索を続ける。
    探索位置は毎回必ず前進し、ウィンドウ末尾で終わる。

    Returns:
        一致した unit の start code 位置。見つからない、または
        時間制限を超えた場合は -1。
    """
    config = config or ScanConfig()
    if data is None or offset < 0:
        return NOT_FOUND

    window_end = _window_end(data, offset, length)
    watchdog = _Watchdog(config)
    pos = offset

    while True:
        start = search_nal_unit_start(data, pos, window_end - pos)
        if not start.found:
            return NOT_FOUND

        header = start.offset + start.prefix_size
        if data[header] & NAL_TYPE_MASK == unit_type:
            return start.offset

        assert header > pos, "scan position must advance"
        pos = header

        if watchdog.expired():
            logger.warning(
                "Cannot process data within %d msec in %d bytes",
                config.time_budget_ms,
                window_end - offset,
            )
            return NOT_FOUND


def is_valid_nal_unit(
    data: bytes | None, offset: int = 0, length: int | None = None
) -> bool:
    """バッファ先頭が start code で始まっていそうかを簡易判定する.

    先頭バイトが 0 で、続く最大 3 バイト中の最初の非ゼロバイトが 1 なら True。
    unit 全体の妥当性は見ない。
    """
    if data is None:
        return False
    if length is None:
        length = len(data) - offset
    if length <= len(NAL_PREFIX_4) or offset < 0 or offset + 4 > len(data):
        return False

    if data[offset] != 0:
        return False
    for cpos in range(1, len(NAL_PREFIX_4)):
        if data[offset + cpos] != 0:
            return data[offset + cpos] == 1
    return False


def get_nal_unit_type(
    data: bytes | None, offset: int = 0, length: int | None = None
) -> int:
    """offset の start code に続く NAL unit のタイプを返す.

    Returns:
        NAL type (0-31)。start code で始まっていなければ -1。
    """
    if data is None:
        return NOT_FOUND
    if length is None:
        length = len(data) - offset
    if length <= len(NAL_PREFIX_4) or offset < 0 or offset + 5 > len(data):
        return NOT_FOUND

    if data[offset + 2] == 1:
        return data[offset + 3] & NAL_TYPE_MASK
    if data[offset + 3] == 1:
        return data[offset + 4] & NAL_TYPE_MASK
    return NOT_FOUND
