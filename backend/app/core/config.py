# 환경변수 로딩 (.env)
from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"  # 필요 시 prod/staging로 분리
    MONGO_DB: str = "recipes"
    MONGO_COLLECTION: str = "recipes"

    # "development"일 때만 500 응답에 에러 상세 노출
    APP_ENV: str = "production"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    # 시드 스크립트
    SEED_BATCH_SIZE: int = 50
    SEED_DATA_PATH: Optional[str] = None

    class Config:
        env_file = ".env"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"

settings = Settings()
