# app/db/store.py
# recipes 컬렉션 접근 객체: 라우터는 이 객체만 의존한다 (Depends(get_store))

from __future__ import annotations
import logging
import re
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection

from app.db.indexes import ensure_recipe_indexes

log = logging.getLogger(__name__)

_NUTRIENT_OP_RE = re.compile(r"^[<>=]+")


def parse_nutrient_filter(expr: str) -> Any:
    """"<=300" 같은 문자열을 Mongo 비교식으로. 연산자 없으면 정확일치."""
    s = str(expr).strip()
    m = _NUTRIENT_OP_RE.match(s)
    op = m.group(0) if m else "="
    try:
        value = float(s[len(m.group(0)):] if m else s)
    except ValueError:
        return None
    if op == ">":
        return {"$gt": value}
    if op == ">=":
        return {"$gte": value}
    if op == "<":
        return {"$lt": value}
    if op == "<=":
        return {"$lte": value}
    return value


class RecipeStore:
    def __init__(self, collection: AsyncIOMotorCollection):
        self.col = collection

    async def ping(self) -> None:
        await self.col.database.command("ping")

    async def ensure_indexes(self) -> None:
        await ensure_recipe_indexes(self.col)

    # ------------------------------
    # 조회 (목록/검색 경로)
    # ------------------------------

    async def find_page(
        self,
        query: Dict[str, Any],
        sort: Sequence[Tuple[str, int]],
        skip: int,
        limit: int,
    ) -> List[Dict[str, Any]]:
        cur = self.col.find(query)
        if sort:
            cur = cur.sort(list(sort))
        cur = cur.skip(skip).limit(limit)
        return await cur.to_list(length=None)

    async def count(self, query: Dict[str, Any]) -> int:
        return await self.col.count_documents(query)

    # ------------------------------
    # 목록 경로에서 쓰지 않는 보조 조회
    # ------------------------------

    async def search_text(self, text: str, limit: int = 50) -> List[Dict[str, Any]]:
        # title/cuisine/description 텍스트 인덱스 사용
        cur = self.col.find({"$text": {"$search": text}}).limit(limit)
        return await cur.to_list(length=limit)

    async def filter_by_nutrients(self, filters: Dict[str, str], limit: int = 50) -> List[Dict[str, Any]]:
        # 예: {"calories": "<=300"}: 숫자로 저장된 영양소에만 맞는다
        query: Dict[str, Any] = {}
        for name, expr in (filters or {}).items():
            if not expr:
                continue
            cond = parse_nutrient_filter(expr)
            if cond is not None:
                query[f"nutrients.{name}"] = cond
        cur = self.col.find(query).limit(limit)
        return await cur.to_list(length=limit)

    # ------------------------------
    # 시드 전용: 전체 삭제 후 배치 삽입
    # ------------------------------

    async def replace_all(self, docs: Iterable[Dict[str, Any]], batch_size: int = 50) -> int:
        docs = list(docs)
        res = await self.col.delete_many({})
        log.info("[seed] cleared %d existing recipes", res.deleted_count)

        inserted = 0
        for i in range(0, len(docs), batch_size):
            batch = docs[i : i + batch_size]
            await self.col.insert_many(batch, ordered=False)
            inserted += len(batch)
            log.info("[seed] inserted %d/%d recipes", inserted, len(docs))
        return inserted
