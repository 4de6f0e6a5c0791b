"""FastAPI application: NAL unit inspection server.

リクエストボディの raw H.264 Annex-B バイト列をスキャンし、
NAL unit の一覧・タイプ検索・先頭 start code の簡易判定を JSON で返す。
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from nal_scanner.config import ScanConfig
from nal_scanner.nal_types import h264_nal_unit_type_string
from nal_scanner.scanner import (
    get_nal_unit_type,
    is_valid_nal_unit,
    scan_nal_units,
    search_nal_unit_by_type,
)

logger = logging.getLogger(__name__)

scan_config: ScanConfig  # lifespan で初期化


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションのライフサイクル管理."""
    global scan_config

    time_budget_ms = int(os.environ.get("SCAN_TIME_BUDGET_MS", "100"))
    scan_config = ScanConfig(time_budget_ms=time_budget_ms)
    logger.info("nal-scanner server starting (time_budget_ms=%d)", time_budget_ms)
    yield
    logger.info("nal-scanner server shutting down")


app = FastAPI(
    title="nal-scanner",
    description="H.264 Annex-B NAL unit scanner",
    version="0.1.0",
    lifespan=lifespan,
)


# ============================================================
# レスポンスモデル
# ============================================================


class NalUnitModel(BaseModel):
    """NAL unit 1 件."""

    type: int
    type_name: str
    offset: int
    length: int


class ScanResponse(BaseModel):
    """NAL unit 列挙結果."""

    count: int
    degraded: bool
    units: list[NalUnitModel]


class SearchResponse(BaseModel):
    """タイプ検索結果."""

    found: bool
    offset: int


class ValidateResponse(BaseModel):
    """先頭 start code の簡易判定結果."""

    valid: bool
    unit_type: int
    type_name: str | None = None


def _window_error(data: bytes, offset: int) -> JSONResponse | None:
    if offset > len(data):
        return JSONResponse(
            status_code=400,
            content={"error": f"offset {offset} is beyond {len(data)} bytes"},
        )
    return None


# ============================================================
# ヘルスチェック
# ============================================================


@app.get("/api/healthz")
async def healthz() -> dict:
    """ヘルスチェック."""
    return {"status": "healthy", "time_budget_ms": scan_config.time_budget_ms}


# ============================================================
# REST API: NAL unit スキャン
# ============================================================


@app.post("/api/nal-units", response_model=ScanResponse)
async def list_nal_units(
    request: Request,
    offset: int = Query(0, ge=0),
    length: int | None = Query(None, ge=0),
):
    """ボディ内の NAL unit をすべて列挙."""
    data = await request.body()
    error = _window_error(data, offset)
    if error is not None:
        return error

    result = scan_nal_units(data, offset, length, config=scan_config)
    if result.degraded:
        logger.info("Scan of %d bytes degraded, %d units", len(data), result.count)
    return ScanResponse(
        count=result.count,
        degraded=result.degraded,
        units=[
            NalUnitModel(
                type=nal.type,
                type_name=nal.type_name,
                offset=nal.offset,
                length=nal.length,
            )
            for nal in result.units
        ],
    )


@app.post("/api/nal-units/search", response_model=SearchResponse)
async def search_nal_unit(
    request: Request,
    unit_type: int = Query(..., ge=0, le=31),
    offset: int = Query(0, ge=0),
    length: int | None = Query(None, ge=0),
):
    """指定タイプの最初の NAL unit の位置を返す."""
    data = await request.body()
    error = _window_error(data, offset)
    if error is not None:
        return error

    if length is None:
        length = len(data) - offset
    found_at = search_nal_unit_by_type(data, offset, length, unit_type, config=scan_config)
    return SearchResponse(found=found_at >= 0, offset=found_at)


@app.post("/api/nal-units/validate", response_model=ValidateResponse)
async def validate_nal_unit(
    request: Request,
    offset: int = Query(0, ge=0),
    length: int | None = Query(None, ge=0),
):
    """ボディが start code で始まっているかを簡易判定."""
    data = await request.body()
    error = _window_error(data, offset)
    if error is not None:
        return error

    valid = is_valid_nal_unit(data, offset, length)
    unit_type = get_nal_unit_type(data, offset, length) if valid else -1
    return ValidateResponse(
        valid=valid,
        unit_type=unit_type,
        type_name=h264_nal_unit_type_string(unit_type) if unit_type >= 0 else None,
    )
