"""
시드(가져오기) 테스트
원본 레코드 정규화 / 레코드 단위 건너뛰기 / 전체 교체 배치 삽입
"""
import json

import pytest

from app.db.store import RecipeStore
from app.scripts.seed_recipes import build_docs, make_doc, iter_raw_recipes, main


class FakeInsertCollection:
    """replace_all 이 호출하는 motor 컬렉션 메서드만 흉내"""

    class _Deleted:
        deleted_count = 3

    def __init__(self):
        self.deleted = False
        self.batches = []

    async def delete_many(self, query):
        assert query == {}
        self.deleted = True
        return self._Deleted()

    async def insert_many(self, docs, ordered=True):
        assert self.deleted, "기존 문서 삭제 전에 삽입하면 안 된다"
        self.batches.append(list(docs))


def test_title_and_cuisine_only():
    doc = build_docs([{"title": "Plain Rice", "cuisine": "Asian"}])[0]
    assert doc["rating"] == 0
    assert doc["prep_time"] == 0 and doc["cook_time"] == 0
    assert doc["total_time"] == 0
    assert doc["ingredients"] == [] and doc["instructions"] == []
    assert doc["url"] == ""
    assert doc["continent"] == "Unknown"


def test_numeric_title_cast_to_string():
    docs = build_docs([{"title": 1984, "cuisine": "British"}])
    assert [d["title"] for d in docs] == ["1984"]


def test_missing_fields_defaults():
    d = make_doc({"title": "Mystery"})
    assert d["cuisine"] == "Uncategorized"
    assert d["nutrients"] == {}
    assert d["description"] == ""


def test_total_time_computed_from_parts():
    d = make_doc({"title": "Chili", "prep_time": 15, "cook_time": 45})
    assert d["total_time"] == 60


def test_nan_numbers_default_to_zero():
    d = make_doc({"title": "Soup", "rating": float("nan"), "prep_time": None, "cook_time": 10})
    assert d["rating"] == 0
    assert d["total_time"] == 10


def test_source_keys_mapped():
    d = make_doc({"title": "Gumbo", "URL": "https://example.com/gumbo", "Continent": "North America",
                  "Country_State": "Louisiana"})
    assert d["url"] == "https://example.com/gumbo"
    assert d["continent"] == "North America"
    assert d["country_state"] == "Louisiana"


def test_entries_without_title_and_invalid_records_skipped():
    data = {
        "0": {"title": "Good", "cuisine": "Italian", "rating": 4.5},
        "1": {"cuisine": "No Title"},
        "2": None,
        "3": {"title": "Too Good", "rating": 9},
        "4": {"title": "x" * 300},
    }
    docs = build_docs(data)
    assert [d["title"] for d in docs] == ["Good"]


def test_iter_raw_recipes_rejects_scalars():
    with pytest.raises(ValueError):
        list(iter_raw_recipes("not a dataset"))


@pytest.mark.asyncio
async def test_replace_all_deletes_then_inserts_in_batches():
    col = FakeInsertCollection()
    store = RecipeStore(col)
    docs = [{"title": f"R{i}"} for i in range(120)]

    inserted = await store.replace_all(docs, batch_size=50)

    assert inserted == 120
    assert [len(b) for b in col.batches] == [50, 50, 20]


def test_main_requires_dataset_path(monkeypatch):
    from app.core.config import settings
    monkeypatch.setattr(settings, "SEED_DATA_PATH", None)
    assert main([]) == 2


def test_main_reports_failure(tmp_path, monkeypatch):
    path = tmp_path / "recipes.json"
    path.write_text(json.dumps({"0": {"title": "Only"}}), encoding="utf-8")

    async def _fail(*args, **kwargs):
        raise ConnectionError("no mongo")

    monkeypatch.setattr("app.scripts.seed_recipes.open_store", _fail)
    assert main([str(path)]) == 1
