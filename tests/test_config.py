"""ScanConfig のテスト."""

import time

from nal_scanner.config import ScanConfig


def test_scan_config_defaults():
    """デフォルト設定が正しいことを確認."""
    config = ScanConfig()
    assert config.time_budget_ms == 100
    assert config.clock is time.monotonic


def test_scan_config_custom():
    """カスタム設定が反映されることを確認."""
    config = ScanConfig(time_budget_ms=250, clock=lambda: 0.0)
    assert config.time_budget_ms == 250
    assert config.clock() == 0.0
