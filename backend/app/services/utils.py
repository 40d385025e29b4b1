# app/services/utils.py
# 쿼리스트링 숫자/문자열 관대한 변환 유틸
# - "12abc" → 12, "4.5점" → 4.5 처럼 앞쪽 숫자만 읽는다
# - 못 읽으면 None (에러로 올리지 않음 → 필터 생략/기본값 처리)

from __future__ import annotations
import math
import re
from typing import Any, Optional

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# 숫자 필드에서 "값 없음"으로 취급하는 문자열
NULLISH = ("null", "undefined")

def parse_int(value: Any) -> Optional[int]:
    # 앞쪽 정수 부분만 파싱. 소수점 이하는 버림 ("7.9" → 7)
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _INT_RE.match(str(value))
    return int(m.group(1)) if m else None

def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else None
    m = _FLOAT_RE.match(str(value))
    if not m:
        return None
    v = float(m.group(1))
    return v if math.isfinite(v) else None

def parse_number_filter(value: Any) -> Optional[float]:
    # "null"/"undefined" 문자열은 값이 없는 것으로 본다
    if value in NULLISH:
        return None
    return parse_float(value)

def to_number_or_none(value: Any) -> Optional[float]:
    # 저장 전 숫자 정규화: NaN/무한대/파싱불가 → None
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    s = str(value).strip()
    if not s:
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    return v if math.isfinite(v) else None

def contains_ci(text: str) -> dict:
    # 대소문자 무시 부분일치. 입력은 정규식이 아니라 리터럴로 취급
    return {"$regex": re.escape(text), "$options": "i"}
