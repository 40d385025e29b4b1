"""
공용 픽스처
- FakeRecipeStore: RecipeStore 대신 쓰는 메모리 store
  번역기가 만드는 Mongo 필터의 부분집합($or, $regex, $gte/$lte/$eq, 정확일치, 칼로리 $expr)만 평가한다
"""
import re
from typing import Any, Dict, List, Sequence, Tuple

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.core.deps import get_store
from app.main import app


def _get_path(doc: Dict[str, Any], path: str) -> Any:
    cur: Any = doc
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
    return cur


def _cmp(value: Any, op: str, target: Any) -> bool:
    # 숫자끼리만 비교 (Mongo 타입 브래킷과 같은 결과)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    if op == "$gte":
        return value >= target
    if op == "$lte":
        return value <= target
    if op == "$gt":
        return value > target
    if op == "$lt":
        return value < target
    if op == "$eq":
        return value == target
    raise NotImplementedError(op)


def _match_field(value: Any, cond: Any) -> bool:
    if isinstance(cond, dict):
        if "$regex" in cond:
            flags = re.I if "i" in cond.get("$options", "") else 0
            return isinstance(value, str) and re.search(cond["$regex"], value, flags) is not None
        return all(_cmp(value, op, target) for op, target in cond.items())
    return value == cond


def _leading_number(doc: Dict[str, Any], regex_find: Dict[str, Any]) -> Any:
    # $regexFind → $getField("match") → $convert(double, onError/onNull None)
    value = _get_path(doc, regex_find["input"].lstrip("$"))
    if not isinstance(value, str):
        return None
    m = re.search(regex_find["regex"], value)
    return float(m.group(0)) if m else None


def _eval_nutrient_expr(doc: Dict[str, Any], expr: Dict[str, Any]) -> bool:
    # nutrient_number_expr 가 만드는 $let 모양만 평가
    let = expr["$let"]
    convert = let["vars"]["n"]["$convert"]
    n = _leading_number(doc, convert["input"]["$getField"]["input"]["$regexFind"])
    for clause in let["in"]["$and"]:
        (op, (_, target)), = clause.items()
        if op == "$ne":
            if n == target:
                return False
        elif n is None or not _cmp(n, op, target):
            return False
    return True


def matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, cond in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in cond):
                return False
        elif key == "$expr":
            if not _eval_nutrient_expr(doc, cond):
                return False
        elif key.startswith("$"):
            raise NotImplementedError(key)
        elif not _match_field(_get_path(doc, key), cond):
            return False
    return True


class FakeRecipeStore:
    def __init__(self, docs: List[Dict[str, Any]]):
        self.docs = [dict(d, _id=d.get("_id", ObjectId())) for d in docs]
        self.calls: List[Tuple[str, Any]] = []

    async def find_page(self, query, sort: Sequence[Tuple[str, int]], skip: int, limit: int):
        self.calls.append(("find", query))
        if skip < 0:
            raise ValueError("skip must be >= 0")
        hits = [d for d in self.docs if matches(d, query)]
        for field, direction in reversed(list(sort)):
            hits.sort(
                key=lambda d: (_get_path(d, field) is not None, _get_path(d, field) or 0),
                reverse=direction < 0,
            )
        return [dict(d) for d in hits[skip : skip + limit]]

    async def count(self, query):
        self.calls.append(("count", query))
        return sum(1 for d in self.docs if matches(d, query))


class BrokenRecipeStore:
    async def find_page(self, *args, **kwargs):
        raise ConnectionError("mongo unreachable")

    async def count(self, *args, **kwargs):
        raise ConnectionError("mongo unreachable")


# 평점이 모두 다른 12개 레시피 (정렬 결과가 결정적)
RATINGS = [0.2, 0.6, 1.0, 1.4, 1.8, 2.2, 2.6, 3.0, 3.4, 3.8, 4.2, 4.6]
CUISINES = ["Italian", "Mexican", "Korean", "Southern Recipes"]


@pytest.fixture
def recipe_docs() -> List[Dict[str, Any]]:
    docs = []
    for i, rating in enumerate(RATINGS):
        docs.append({
            "title": f"Recipe {i:02d}",
            "cuisine": CUISINES[i % len(CUISINES)],
            "rating": rating,
            "prep_time": 5 * (i % 4),
            "cook_time": 10 + i,
            "total_time": 5 * (i % 4) + 10 + i,
            "description": "A hearty pie" if i == 3 else "Weeknight dinner",
            "ingredients": [],
            "instructions": [],
            "nutrients": {"calories": f"{200 + 25 * i} kcal"},
        })
    return docs


@pytest.fixture
def fake_store(recipe_docs) -> FakeRecipeStore:
    return FakeRecipeStore(recipe_docs)


@pytest.fixture
def client(fake_store):
    # 스타트업 이벤트(Mongo 연결)는 돌리지 않는다: with 블록 없이 사용
    app.dependency_overrides[get_store] = lambda: fake_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    app.dependency_overrides[get_store] = lambda: BrokenRecipeStore()
    yield TestClient(app)
    app.dependency_overrides.clear()
