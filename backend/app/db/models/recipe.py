# 레시피 표준 스키마 + 저장 전 정규화
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.services.utils import to_number_or_none

NUMERIC_FIELDS = ("rating", "prep_time", "cook_time", "total_time")
MAX_TITLE = 200

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Nutrients(BaseModel):
    # 단위 포함 문자열 그대로 저장 (예: "389 kcal"), 모르는 키는 버림
    model_config = ConfigDict(extra="ignore")

    calories: Optional[str] = None
    carbohydrateContent: Optional[str] = None
    cholesterolContent: Optional[str] = None
    fiberContent: Optional[str] = None
    proteinContent: Optional[str] = None
    saturatedFatContent: Optional[str] = None
    sodiumContent: Optional[str] = None
    sugarContent: Optional[str] = None
    fatContent: Optional[str] = None
    unsaturatedFatContent: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _v_to_str(cls, v):
        if v is None:
            return None
        return str(v)

class RecipeDoc(BaseModel):
    """recipes 컬렉션에 들어가는 문서. 시드에서만 생성된다."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=MAX_TITLE)
    cuisine: str = Field(..., min_length=1)
    rating: Optional[float] = Field(default=0, ge=0, le=5)
    prep_time: Optional[float] = Field(default=None, ge=0)
    cook_time: Optional[float] = Field(default=None, ge=0)
    total_time: Optional[float] = Field(default=None, ge=0)
    description: str = ""
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    serves: str = ""
    url: str = ""
    nutrients: Nutrients = Field(default_factory=Nutrients)
    continent: str = "Unknown"
    country_state: str = "Unknown"
    createdAt: datetime = Field(default_factory=_utcnow)
    updatedAt: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="before")
    @classmethod
    def _v_numbers(cls, data: Any):
        if isinstance(data, dict):
            return normalize_numeric_fields(data)
        return data

    @model_validator(mode="after")
    def _v_total_time(self):
        # total_time 없으면 prep + cook (없는 쪽은 0)
        if self.total_time is None:
            self.total_time = (self.prep_time or 0) + (self.cook_time or 0)
        return self

    def to_mongo(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=False)

def normalize_numeric_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    # NaN/파싱불가 숫자 → None (NaN을 그대로 저장하지 않는다)
    out = dict(raw)
    for field in NUMERIC_FIELDS:
        if field in out:
            out[field] = to_number_or_none(out[field])
    return out
