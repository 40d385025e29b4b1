# app/main.py
# FastAPI 앱 초기화 및 라우터 설정

from __future__ import annotations

import logging
from asyncio import sleep

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes_recipes import router as recipes_router, router_v2 as recipes_v2_router
from app.core.config import settings
from app.core.deps import StoreNotReady
from app.db.init import close_store, open_store
from app.db.models.schemas import error_envelope

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

DB_INIT_RETRIES = 20

app = FastAPI(title="Recipe Catalog - API", version="0.1.0")

# CORS: 프론트 개발 서버 허용
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.mongo_client = None
app.state.store = None

# 앱 시작/종료 이벤트 핸들러
@app.on_event("startup")
async def on_startup() -> None:
    # 1) DB 먼저 붙는다 (최대 20회, 1초 간격)
    for i in range(DB_INIT_RETRIES):
        try:
            client, store = await open_store(settings)
            log.info("[startup] db ready")
            break
        except Exception as e:
            log.warning("[startup] db init retry %d: %s", i + 1, e)
            await sleep(1.0)
    else:
        log.error("[startup] db init failed after retries")
        return

    app.state.mongo_client = client
    app.state.store = store

    # 2) 인덱스 보장
    try:
        await store.ensure_indexes()
        log.info("[startup] indexes ensured")
    except Exception as e:
        log.warning("[startup] ensure_indexes failed: %s", e)

@app.on_event("shutdown")
async def on_shutdown() -> None:
    # 몽고db 커넥션 정리
    await close_store(app.state.mongo_client)
    app.state.mongo_client = None
    app.state.store = None
    log.info("[shutdown] db closed")

@app.exception_handler(StoreNotReady)
async def store_not_ready_handler(request: Request, exc: StoreNotReady) -> JSONResponse:
    log.error("store not ready: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_envelope("Database is not available", exc, settings.is_development),
    )

@app.get("/")
async def root():
    return {"status": "ok"}

@app.get("/health")
async def health():
    ok = {"status": "ok", "db": "skip"}
    store = app.state.store
    if store is not None:
        try:
            await store.ping()
            ok["db"] = "ok"
        except Exception as e:
            ok["db"] = f"error: {e}"
    return ok

app.include_router(recipes_router)
app.include_router(recipes_v2_router)
