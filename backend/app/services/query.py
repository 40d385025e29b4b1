# app/services/query.py
# 쿼리스트링 → Mongo 필터/정렬/페이지 변환 (I/O 없음)
#
# 세 가지 모양을 지원한다:
#   A  : GET /api/recipes              (목록, 넓은 필터 + 숫자 정확일치)
#   B1 : GET /api/recipes/search       (검색, 범위 검증 있는 임계값 필터)
#   B2 : GET /api/v2/recipes/search    (검색, *Op 연산자 선택)
# 잘못된 값은 절대 에러로 올리지 않고 버리거나 기본값으로 대체한다.

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.services.utils import (
    contains_ci,
    parse_float,
    parse_int,
    parse_number_filter,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_BY = "rating"

# Shape A: 원시 파라미터로 오면 정확일치 필터로 해석하는 숫자 필드
EXACT_NUMERIC_FIELDS = ("prep_time", "cook_time", "total_time", "rating")

# B2 연산자
OPS = {"gte": "$gte", "lte": "$lte", "eq": "$eq"}

# 저장된 영양소 문자열("389 kcal")의 앞쪽 숫자
_LEADING_NUMBER = r"^\s*-?\d+(\.\d+)?"


class RecipeQuery(BaseModel):
    """store.find_page / store.count 에 그대로 넘기는 실행 단위"""
    filter: Dict[str, Any] = Field(default_factory=dict)
    sort: List[Tuple[str, int]] = Field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        # 음수 page도 보정하지 않는다 (store에서 거부됨)
        return (self.page - 1) * self.limit


# ------------------------------
# 파라미터 모델 (모두 원시 문자열, 선택)
# ------------------------------

class PageParams(BaseModel):
    # camelCase 별칭만 받는다 (min_rating 같은 필드명 철자는 무시)
    model_config = ConfigDict(extra="ignore")

    page: Optional[str] = None
    limit: Optional[str] = None
    sort_by: Optional[str] = Field(default=None, alias="sortBy")
    sort_order: Optional[str] = Field(default=None, alias="sortOrder")

    @classmethod
    def from_params(cls, params: Mapping[str, Any]):
        # 쿼리스트링 값은 문자열로만 받는다 (중복 키는 마지막 값)
        return cls.model_validate({k: str(v) for k, v in dict(params).items() if v is not None})


class ListParams(PageParams):
    """Shape A"""
    q: Optional[str] = None
    cuisine: Optional[str] = None
    rating: Optional[str] = None
    max_total_time: Optional[str] = Field(default=None, alias="maxTotalTime")
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    total_time: Optional[str] = None


class SearchParams(PageParams):
    """Variant B1"""
    q: Optional[str] = None
    cuisine: Optional[str] = None
    min_rating: Optional[str] = Field(default=None, alias="minRating")
    max_prep_time: Optional[str] = Field(default=None, alias="maxPrepTime")
    max_cook_time: Optional[str] = Field(default=None, alias="maxCookTime")


class AdvancedSearchParams(PageParams):
    """Variant B2"""
    title: Optional[str] = None
    cuisine: Optional[str] = None
    rating: Optional[str] = None
    rating_op: Optional[str] = Field(default=None, alias="ratingOp")
    calories: Optional[str] = None
    calories_op: Optional[str] = Field(default=None, alias="caloriesOp")
    total_time: Optional[str] = None
    time_op: Optional[str] = Field(default=None, alias="timeOp")


# ------------------------------
# 공통: 페이지/정렬
# ------------------------------

def build_page(p: PageParams) -> Tuple[int, int]:
    # 0이나 파싱 실패는 기본값, 음수는 그대로 통과
    page = parse_int(p.page) or DEFAULT_PAGE
    limit = parse_int(p.limit) or DEFAULT_LIMIT
    return page, limit


def build_sort(p: PageParams) -> List[Tuple[str, int]]:
    # "asc" 정확히 일치할 때만 오름차순. 동순위 정렬은 보장하지 않음
    field = p.sort_by or DEFAULT_SORT_BY
    direction = 1 if p.sort_order == "asc" else -1
    return [(field, direction)]


def _finish(p: PageParams, query: Dict[str, Any]) -> RecipeQuery:
    page, limit = build_page(p)
    return RecipeQuery(filter=query, sort=build_sort(p), page=page, limit=limit)


# ------------------------------
# Shape A: 목록
# ------------------------------

def build_list_filter(p: ListParams) -> Dict[str, Any]:
    query: Dict[str, Any] = {}

    if p.q:
        query["$or"] = [
            {"title": contains_ci(p.q)},
            {"cuisine": contains_ci(p.q)},
            {"description": contains_ci(p.q)},
        ]

    if p.cuisine:
        query["cuisine"] = contains_ci(p.cuisine)

    if p.rating:
        v = parse_float(p.rating)
        if v is not None:
            query["rating"] = {"$gte": v}

    if p.max_total_time:
        v = parse_int(p.max_total_time)
        if v is not None:
            query["total_time"] = {"$lte": v}

    # 원시 숫자 파라미터는 정확일치. 같은 키를 덮어쓰므로 rating/total_time 임계값보다 우선한다
    # (기존 API 호환을 위해 유지. rating 임계값은 사실상 항상 정확일치로 바뀐다)
    for field in EXACT_NUMERIC_FIELDS:
        raw = getattr(p, field)
        if raw is None:
            continue
        v = parse_number_filter(raw)
        if v is not None:
            query[field] = v

    return query


def build_list_query(params: Mapping[str, Any]) -> RecipeQuery:
    p = ListParams.from_params(params)
    return _finish(p, build_list_filter(p))


# ------------------------------
# Variant B1: 검색
# ------------------------------

def build_search_filter(p: SearchParams) -> Dict[str, Any]:
    query: Dict[str, Any] = {}

    if p.q:
        query["$or"] = [
            {"title": contains_ci(p.q)},
            {"description": contains_ci(p.q)},
        ]

    if p.cuisine:
        query["cuisine"] = contains_ci(p.cuisine)

    # 1~5 범위 밖이면 무시
    if p.min_rating:
        rating = parse_float(p.min_rating)
        if rating is not None and 1 <= rating <= 5:
            query["rating"] = {"$gte": rating}

    if p.max_prep_time:
        prep = parse_int(p.max_prep_time)
        if prep is not None and prep > 0:
            query["prep_time"] = {"$lte": prep}

    if p.max_cook_time:
        cook = parse_int(p.max_cook_time)
        if cook is not None and cook > 0:
            query["cook_time"] = {"$lte": cook}

    return query


def build_search_query(params: Mapping[str, Any]) -> RecipeQuery:
    p = SearchParams.from_params(params)
    return _finish(p, build_search_filter(p))


# ------------------------------
# Variant B2: 연산자 검색
# ------------------------------

def resolve_op(op: Optional[str], default: str) -> str:
    # 모르는 연산자는 기본값으로
    return OPS.get(op or "", OPS[default])


def nutrient_number_expr(path: str, mongo_op: str, value: float) -> Dict[str, Any]:
    # 영양소는 문자열로 저장됨 → 앞쪽 숫자를 double로 바꿔 비교, 숫자 없으면 불일치
    as_number = {
        "$convert": {
            "input": {"$getField": {"field": "match", "input": {
                "$regexFind": {"input": f"${path}", "regex": _LEADING_NUMBER}
            }}},
            "to": "double",
            "onError": None,
            "onNull": None,
        }
    }
    return {
        "$expr": {
            "$let": {
                "vars": {"n": as_number},
                "in": {"$and": [{"$ne": ["$$n", None]}, {mongo_op: ["$$n", value]}]},
            }
        }
    }


def build_advanced_filter(p: AdvancedSearchParams) -> Dict[str, Any]:
    query: Dict[str, Any] = {}

    if p.title:
        query["title"] = contains_ci(p.title)

    if p.cuisine:
        query["cuisine"] = contains_ci(p.cuisine)

    if p.rating:
        v = parse_float(p.rating)
        if v is not None:
            query["rating"] = {resolve_op(p.rating_op, "gte"): v}

    if p.calories:
        v = parse_float(p.calories)
        if v is not None:
            query.update(nutrient_number_expr("nutrients.calories", resolve_op(p.calories_op, "gte"), v))

    if p.total_time:
        v = parse_float(p.total_time)
        if v is not None:
            query["total_time"] = {resolve_op(p.time_op, "lte"): v}

    return query


def build_advanced_query(params: Mapping[str, Any]) -> RecipeQuery:
    p = AdvancedSearchParams.from_params(params)
    return _finish(p, build_advanced_filter(p))
