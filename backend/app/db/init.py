# app/db/init.py
# Mongo 연결 유틸: motor
# 앱 시작 시 open_store(), 종료 시 close_store(). 핸들은 app.state.store 로 주입한다

from __future__ import annotations
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from app.core.config import Settings, settings as default_settings
from app.db.store import RecipeStore

log = logging.getLogger(__name__)

async def open_store(cfg: Optional[Settings] = None) -> tuple[AsyncIOMotorClient, RecipeStore]:
    # 연결 확인까지 (준비 안 됐으면 예외)
    cfg = cfg or default_settings
    client = AsyncIOMotorClient(cfg.MONGO_URI)
    store = RecipeStore(client[cfg.MONGO_DB][cfg.MONGO_COLLECTION])
    try:
        await store.ping()
    except Exception:
        client.close()
        raise
    log.info("connected to mongo db=%s collection=%s", cfg.MONGO_DB, cfg.MONGO_COLLECTION)
    return client, store

async def close_store(client: Optional[AsyncIOMotorClient]) -> None:
    # 앱 종료 시 커넥션 정리
    if client is not None:
        client.close()
