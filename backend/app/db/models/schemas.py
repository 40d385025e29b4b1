# app/db/models/schemas.py
# 응답 봉투(envelope) 모델
# RecipePage: 검색(B1) 응답, success 없음
# RecipeListResponse: 목록/검색 v2 응답, success=True
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

def to_recipe_out(doc: Mapping[str, Any]) -> Dict[str, Any]:
    # _id(ObjectId) → 문자열. 나머지 필드는 저장된 그대로 (프론트가 그대로 소비)
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    return out

class RecipePage(BaseModel):
    page: int
    limit: int
    total: int
    data: List[Dict[str, Any]] = Field(default_factory=list)

class RecipeListResponse(RecipePage):
    success: bool = True

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Any = Field(default_factory=dict)

def error_envelope(message: str, exc: Optional[BaseException], debug: bool) -> Dict[str, Any]:
    # 개발 모드에서만 에러 메시지 노출, 그 외에는 빈 객체
    detail: Any = str(exc) if (debug and exc is not None) else {}
    return ErrorResponse(message=message, error=detail).model_dump()
