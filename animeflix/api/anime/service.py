from typing import List, Dict, Any, Optional

from animeflix.core.params import parse_page, require
from animeflix.parsers.base import AnimeProvider, compose_episode_id


class AnimeService:
    """Проверяет параметры запроса и передаёт их провайдеру аниме"""

    def __init__(self, provider: AnimeProvider, strict_pages: bool = False):
        self.provider = provider
        self.strict_pages = strict_pages

    def _page(self, page: Optional[str]) -> int:
        return parse_page(page, strict=self.strict_pages)

    async def search_anime_by_query(self, query: Optional[str], page: Optional[str]) -> Dict[str, Any]:
        query = require(query, "Query is required")
        page_number = self._page(page)
        return await self.provider.search_anime(query, page_number)

    async def get_episode_sources(self, anime_name: Optional[str], episode_number: Optional[str],
                                  translation_id: Optional[str] = None) -> Dict[str, Any]:
        anime_name = require(anime_name, "Anime name is required")
        episode_number = require(episode_number, "Episode number is required")
        episode_id = compose_episode_id(anime_name, episode_number)
        return await self.provider.fetch_episode_sources(episode_id, translation_id or None)

    async def get_episode_servers(self, episode_id: Optional[str]) -> List[Dict[str, Any]]:
        episode_id = require(episode_id, "Episode id is required")
        return await self.provider.fetch_episode_servers(episode_id)

    async def get_recent_episodes(self, page: Optional[str]) -> Dict[str, Any]:
        return await self.provider.fetch_recent_episodes(self._page(page))

    async def get_top_airing(self, page: Optional[str]) -> Dict[str, Any]:
        return await self.provider.fetch_top_airing(self._page(page))

    async def get_anime_list(self, page: Optional[str]) -> Dict[str, Any]:
        return await self.provider.fetch_anime_list(self._page(page))

    async def get_anime_info(self, anime_id: Optional[str]) -> Dict[str, Any]:
        anime_id = require(anime_id, "Anime id is required")
        return await self.provider.fetch_anime_info(anime_id)
