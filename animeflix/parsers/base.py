from typing import Any, Dict, List, Optional, Protocol, Tuple

from animeflix.core.errors import InvalidParameterError

EPISODE_SEPARATOR = "-episode-"


def compose_episode_id(anime_name: str, episode_number: str) -> str:
    """"one-piece" + "1" -> "one-piece-episode-1" (регистр не меняется)"""
    return f"{anime_name}{EPISODE_SEPARATOR}{episode_number}"


def split_episode_id(episode_id: str) -> Tuple[str, int]:
    anime_id, sep, number = episode_id.rpartition(EPISODE_SEPARATOR)
    if not sep or not anime_id or not number.isdigit():
        raise InvalidParameterError(
            f"Episode id must look like <anime>{EPISODE_SEPARATOR}<number>, got '{episode_id}'"
        )
    return anime_id, int(number)


def build_page(items: List[Dict[str, Any]], page: int, per_page: int) -> Dict[str, Any]:
    """Локальная пагинация для источников, которые не умеют отдавать страницы.
    Страница меньше 1 считается первой, в ответе тоже 1."""
    page = max(page, 1)
    offset = (page - 1) * per_page
    return {
        "currentPage": page,
        "hasNextPage": len(items) > offset + per_page,
        "results": items[offset:offset + per_page],
    }


class AnimeProvider(Protocol):
    """Минимальный набор возможностей источника аниме"""

    async def search_anime(self, query: str, page: int) -> Dict[str, Any]: ...

    async def fetch_episode_sources(self, episode_id: str,
                                    translation_id: Optional[str] = None) -> Dict[str, Any]: ...

    async def fetch_episode_servers(self, episode_id: str) -> List[Dict[str, Any]]: ...

    async def fetch_recent_episodes(self, page: int) -> Dict[str, Any]: ...

    async def fetch_top_airing(self, page: int) -> Dict[str, Any]: ...

    async def fetch_anime_list(self, page: int) -> Dict[str, Any]: ...

    async def fetch_anime_info(self, anime_id: str) -> Dict[str, Any]: ...

    async def aclose(self) -> None: ...


class MangaProvider(Protocol):
    """Минимальный набор возможностей источника манги"""

    async def search_manga(self, query: str, page: int, limit: int) -> Dict[str, Any]: ...

    async def fetch_manga_info(self, manga_id: str) -> Dict[str, Any]: ...

    async def fetch_chapter_pages(self, chapter_id: str) -> List[Dict[str, Any]]: ...

    async def fetch_latest_updates(self, page: int, limit: int) -> Dict[str, Any]: ...

    async def fetch_recently_added(self, page: int) -> Dict[str, Any]: ...

    async def fetch_popular(self, page: int) -> Dict[str, Any]: ...

    async def fetch_random(self) -> Dict[str, Any]: ...

    async def aclose(self) -> None: ...
