"""スキャン設定."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class ScanConfig:
    """NAL unit スキャン設定.

    Attributes:
        time_budget_ms: 1 回のスキャンに許す最大時間 (ms)。超えたら打ち切り
        clock: 経過時間の計測に使う時計 (秒を返す)
    """

    time_budget_ms: int = 100
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
