# scripts/seed_recipes.py
# 레시피 JSON 데이터셋 → recipes 컬렉션 전체 교체 (기존 문서 삭제 후 배치 삽입)
# 사용: python -m app.scripts.seed_recipes data/US_recipes.json
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.core.config import settings
from app.db.init import close_store, open_store
from app.db.models.recipe import RecipeDoc
from app.services.utils import to_number_or_none

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 원본 → 문서화
# ---------------------------------------------------------------------------

def _num_or_zero(v: Any) -> float:
    n = to_number_or_none(v)
    return n or 0

def _str_list(v: Any) -> List[str]:
    if not isinstance(v, list):
        return []
    return [str(x) for x in v if x is not None]

def _str_or(v: Any, default: str) -> str:
    return str(v) if v else default

def iter_raw_recipes(data: Any) -> Iterable[Dict[str, Any]]:
    # 데이터셋은 {"0": {...}, "1": {...}} 객체 또는 배열
    if isinstance(data, dict):
        values = data.values()
    elif isinstance(data, list):
        values = data
    else:
        raise ValueError(f"unsupported dataset type: {type(data).__name__}")
    for item in values:
        if isinstance(item, dict):
            yield item

def make_doc(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """원본 레시피 → recipes 문서. 제목 없으면 None (건너뜀)"""
    if not raw or not raw.get("title"):
        return None

    prep = _num_or_zero(raw.get("prep_time"))
    cook = _num_or_zero(raw.get("cook_time"))
    total = to_number_or_none(raw.get("total_time")) or (prep + cook)

    return {
        "title": str(raw["title"]),
        "cuisine": _str_or(raw.get("cuisine"), "Uncategorized"),
        "rating": _num_or_zero(raw.get("rating")),
        "prep_time": prep,
        "cook_time": cook,
        "total_time": total,
        "description": _str_or(raw.get("description"), ""),
        "ingredients": _str_list(raw.get("ingredients")),
        "instructions": _str_list(raw.get("instructions")),
        "nutrients": raw.get("nutrients") if isinstance(raw.get("nutrients"), dict) else {},
        "serves": _str_or(raw.get("serves"), ""),
        "url": _str_or(raw.get("URL") or raw.get("url"), ""),
        "continent": _str_or(raw.get("Continent") or raw.get("continent"), "Unknown"),
        "country_state": _str_or(raw.get("Country_State") or raw.get("country_state"), "Unknown"),
    }

def build_docs(data: Any) -> List[Dict[str, Any]]:
    # 검증 실패 레코드는 로그만 남기고 건너뛴다
    docs: List[Dict[str, Any]] = []
    skipped = 0
    for raw in iter_raw_recipes(data):
        d = make_doc(raw)
        if d is None:
            skipped += 1
            continue
        try:
            docs.append(RecipeDoc.model_validate(d).to_mongo())
        except ValidationError as e:
            skipped += 1
            log.warning("[seed] skip %r: %s", d.get("title"), e.errors()[0].get("msg"))
    log.info("[seed] prepared=%d skipped=%d", len(docs), skipped)
    return docs

def load_dataset(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)

# ---------------------------------------------------------------------------
# 실행
# ---------------------------------------------------------------------------

async def seed(path: Path, batch_size: int) -> int:
    docs = build_docs(load_dataset(path))

    client, store = await open_store(settings)
    try:
        await store.ensure_indexes()
        inserted = await store.replace_all(docs, batch_size=batch_size)
    finally:
        await close_store(client)
    return inserted

def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(message)s")
    argv = sys.argv[1:] if argv is None else argv
    raw_path = argv[0] if argv else settings.SEED_DATA_PATH
    if not raw_path:
        log.error("[seed] dataset path required (argument or SEED_DATA_PATH)")
        return 2

    try:
        inserted = asyncio.run(seed(Path(raw_path), settings.SEED_BATCH_SIZE))
    except Exception:
        log.exception("[seed] failed")
        return 1
    log.info("[seed] done. inserted=%d", inserted)
    return 0

if __name__ == "__main__":
    sys.exit(main())
