# 공용 의존성 (레시피 store 핸들)
from fastapi import Request

from app.db.store import RecipeStore

class StoreNotReady(RuntimeError):
    pass

def get_store(request: Request) -> RecipeStore:
    # 스타트업에서 app.state.store 에 붙여둔 핸들. 미초기화면 예외 (main 에서 500 봉투로 변환)
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreNotReady("Recipe store is not initialized yet.")
    return store
