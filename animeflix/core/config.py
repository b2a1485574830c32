from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Основные настройки приложения.
    Считываются из переменных окружения (.env файл)
    """
    APP_NAME: str = "Animeflix REST API"
    APP_VERSION: str = "0.0.1"
    DEBUG: bool = False

    HOST: str = "127.0.0.1"
    PORT: int = 8080

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = ["*"]

    # Провайдеры выбираются по имени из реестра
    ANIME_PROVIDER: str = "kodik"
    MANGA_PROVIDER: str = "mangadex"

    KODIK_TOKEN: Optional[str] = None
    ANIME_PAGE_SIZE: int = 20
    # Kodik листает список с начала, страница N стоит N запросов
    ANIME_MAX_PAGE: int = 50

    MANGADEX_API_URL: str = "https://api.mangadex.org"
    MANGADEX_UPLOADS_URL: str = "https://uploads.mangadex.org"
    MANGA_LANGUAGE: str = "en"
    MANGA_PAGE_SIZE: int = 10

    UPSTREAM_TIMEOUT: float = 20.0

    # "2abc" -> 2 по умолчанию, как parseInt
    STRICT_PAGE_PARSING: bool = False

    OPENAPI_PATH: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
