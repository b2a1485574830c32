from typing import Callable, Dict

from animeflix.core.config import Settings
from animeflix.parsers.base import AnimeProvider, MangaProvider
from animeflix.parsers.kodik_api import KodikAnimeProvider
from animeflix.parsers.mangadex_api import MangaDexProvider

ANIME_PROVIDERS: Dict[str, Callable[[Settings], AnimeProvider]] = {
    "kodik": lambda s: KodikAnimeProvider(
        token=s.KODIK_TOKEN,
        page_size=s.ANIME_PAGE_SIZE,
        max_page=s.ANIME_MAX_PAGE,
    ),
}

MANGA_PROVIDERS: Dict[str, Callable[[Settings], MangaProvider]] = {
    "mangadex": lambda s: MangaDexProvider(
        api_url=s.MANGADEX_API_URL,
        uploads_url=s.MANGADEX_UPLOADS_URL,
        page_size=s.MANGA_PAGE_SIZE,
        language=s.MANGA_LANGUAGE,
        timeout=s.UPSTREAM_TIMEOUT,
    ),
}


def build_anime_provider(settings: Settings) -> AnimeProvider:
    try:
        factory = ANIME_PROVIDERS[settings.ANIME_PROVIDER]
    except KeyError:
        raise ValueError(
            f"Unknown anime provider '{settings.ANIME_PROVIDER}', available: {sorted(ANIME_PROVIDERS)}"
        ) from None
    return factory(settings)


def build_manga_provider(settings: Settings) -> MangaProvider:
    try:
        factory = MANGA_PROVIDERS[settings.MANGA_PROVIDER]
    except KeyError:
        raise ValueError(
            f"Unknown manga provider '{settings.MANGA_PROVIDER}', available: {sorted(MANGA_PROVIDERS)}"
        ) from None
    return factory(settings)
