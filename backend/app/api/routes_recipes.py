# app/api/routes_recipes.py
# 레시피 목록/검색: 쿼리스트링 → 필터/정렬/페이지 → find + count 동시 실행 → 봉투 반환

from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.deps import get_store
from app.db.models.schemas import (
    ErrorResponse,
    RecipeListResponse,
    RecipePage,
    error_envelope,
    to_recipe_out,
)
from app.db.store import RecipeStore
from app.services.query import (
    RecipeQuery,
    build_advanced_query,
    build_list_query,
    build_search_query,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["recipes"])

# 검색 v2 (연산자 선택형): 같은 검색 엔드포인트의 후속 버전
router_v2 = APIRouter(prefix="/api/v2/recipes", tags=["recipes"])

_ERROR_RESPONSES = {500: {"model": ErrorResponse}}

# ------------------------------
# 공통 헬퍼
# ------------------------------

async def _fetch_page(store: RecipeStore, rq: RecipeQuery) -> Tuple[List[Dict[str, Any]], int]:
    # 페이지 조회와 전체 개수는 서로 독립 (동시 실행, 트랜잭션 없음)
    docs, total = await asyncio.gather(
        store.find_page(rq.filter, rq.sort, rq.skip, rq.limit),
        store.count(rq.filter),
    )
    return [to_recipe_out(d) for d in docs], total

def _server_error(message: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=error_envelope(message, exc, settings.is_development),
    )

# ------------------------------
# 엔드포인트
# ------------------------------

@router.get("", response_model=RecipeListResponse, responses=_ERROR_RESPONSES)
async def list_recipes(request: Request, store: RecipeStore = Depends(get_store)):
    """
    목록 (페이지/정렬/필터)
    - page, limit, sortBy, sortOrder
    - q(title/cuisine/description), cuisine, rating(최소), maxTotalTime
    - prep_time, cook_time, total_time, rating: 정확일치
    """
    rq = build_list_query(request.query_params)
    try:
        data, total = await _fetch_page(store, rq)
    except Exception as e:
        log.exception("Error fetching recipes")
        return _server_error("Server error while fetching recipes", e)

    return RecipeListResponse(page=rq.page, limit=rq.limit, total=total, data=data)

@router.get("/search", response_model=RecipePage, responses=_ERROR_RESPONSES)
async def search_recipes(request: Request, store: RecipeStore = Depends(get_store)):
    """
    검색
    - q(title/description), cuisine
    - minRating(1~5), maxPrepTime, maxCookTime (0 초과만)
    """
    rq = build_search_query(request.query_params)
    try:
        data, total = await _fetch_page(store, rq)
    except Exception as e:
        log.exception("Error searching recipes")
        return _server_error("Server error while searching recipes", e)

    return RecipePage(page=rq.page, limit=rq.limit, total=total, data=data)

@router_v2.get("/search", response_model=RecipeListResponse, responses=_ERROR_RESPONSES)
async def search_recipes_v2(request: Request, store: RecipeStore = Depends(get_store)):
    """
    검색 v2
    - title, cuisine
    - rating + ratingOp (gte 기본), calories + caloriesOp (gte 기본), total_time + timeOp (lte 기본)
    """
    rq = build_advanced_query(request.query_params)
    try:
        data, total = await _fetch_page(store, rq)
    except Exception as e:
        log.exception("Error searching recipes (v2)")
        return _server_error("Server error while searching recipes", e)

    return RecipeListResponse(page=rq.page, limit=rq.limit, total=total, data=data)
