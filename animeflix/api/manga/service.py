from typing import List, Dict, Any, Optional

from animeflix.core.params import parse_page, require
from animeflix.parsers.base import MangaProvider


class MangaService:
    """Проверяет параметры запроса и передаёт их провайдеру манги"""

    def __init__(self, provider: MangaProvider, page_size: int = 10, strict_pages: bool = False):
        self.provider = provider
        self.page_size = page_size
        self.strict_pages = strict_pages

    def _page(self, page: Optional[str]) -> int:
        return parse_page(page, strict=self.strict_pages)

    async def search_manga_by_query(self, query: Optional[str], page: Optional[str]) -> Dict[str, Any]:
        query = require(query, "Query is required")
        page_number = self._page(page)
        return await self.provider.search_manga(query, page_number, self.page_size)

    async def get_manga_info(self, manga_id: Optional[str]) -> Dict[str, Any]:
        manga_id = require(manga_id, "Manga id is required")
        return await self.provider.fetch_manga_info(manga_id)

    async def get_manga_list(self, page: Optional[str]) -> Dict[str, Any]:
        return await self.provider.fetch_recently_added(self._page(page))

    async def get_recent_manga(self, page: Optional[str]) -> Dict[str, Any]:
        return await self.provider.fetch_latest_updates(self._page(page), self.page_size)

    async def get_popular_manga(self, page: Optional[str]) -> Dict[str, Any]:
        return await self.provider.fetch_popular(self._page(page))

    async def get_random_manga(self) -> Dict[str, Any]:
        return await self.provider.fetch_random()

    async def get_chapter_pages(self, chapter_id: Optional[str]) -> List[Dict[str, Any]]:
        chapter_id = require(chapter_id, "Chapter id is required")
        return await self.provider.fetch_chapter_pages(chapter_id)
