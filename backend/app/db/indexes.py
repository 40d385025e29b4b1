# app/db/indexes.py
# recipes 컬렉션 인덱스 보장: 앱 스타트업/시드에서 한 번 호출
from __future__ import annotations
from typing import Any, Dict, List, Tuple

from motor.motor_asyncio import AsyncIOMotorCollection

async def ensure_recipe_indexes(coll: AsyncIOMotorCollection) -> None:
    """
    - 이미 있으면 재생성하지 않음
    - 키 스펙이 다르면 드롭 후 재생성
    """
    existing: Dict[str, Dict[str, Any]] = await coll.index_information()

    async def ensure(name: str, keys: List[Tuple[str, Any]], **options: Any) -> None:
        if name in existing:
            idx = existing[name]
            if name.startswith("txt_") or list(idx.get("key", [])) == keys:
                return  # 텍스트 인덱스는 key 표현이 달라 이름으로만 판단
            await coll.drop_index(name)
        await coll.create_index(keys, name=name, **options)

    # 텍스트 검색(컬렉션당 1개), store.search_text 에서만 사용
    await ensure(
        "txt_title_cuisine_description",
        [("title", "text"), ("cuisine", "text"), ("description", "text")],
    )
    # 정렬/필터 대상
    await ensure("rating_-1", [("rating", -1)])
    await ensure("total_time_1", [("total_time", 1)])
    await ensure("cuisine_1", [("cuisine", 1)])
