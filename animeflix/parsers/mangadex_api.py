import asyncio
import logging
from typing import List, Dict, Any, Optional
from urllib.parse import quote

import httpx

from animeflix.core.errors import InvalidParameterError, UpstreamNotFoundError, upstream_errors

logger = logging.getLogger(__name__)

FEED_LIMIT = 500


def path_segment(value: str) -> str:
    """Идентификатор из запроса вставляется в путь как один сегмент"""
    if value in (".", ".."):
        raise InvalidParameterError(f"Invalid id: '{value}'")
    return quote(value, safe="")


def localized(values: Optional[Dict[str, str]], language: str) -> Optional[str]:
    """{"en": "...", "ja": "..."} -> значение на нужном языке или первое попавшееся"""
    if not values:
        return None
    return values.get(language) or values.get("en") or next(iter(values.values()), None)


def tags_of(attributes: Dict[str, Any], group: str, language: str) -> List[str]:
    return [
        localized(tag.get("attributes", {}).get("name"), language)
        for tag in attributes.get("tags", [])
        if tag.get("attributes", {}).get("group") == group
    ]


class MangaDexProvider:
    """
    Источник манги поверх публичного REST API MangaDex.

    Клиент httpx создаётся лениво и закрывается в aclose().
    """
    name = "mangadex"

    def __init__(self, api_url: str = "https://api.mangadex.org",
                 uploads_url: str = "https://uploads.mangadex.org",
                 page_size: int = 10, language: str = "en", timeout: float = 20.0,
                 client: Optional[httpx.AsyncClient] = None):
        self._api_url = api_url.rstrip("/")
        self._uploads_url = uploads_url.rstrip("/")
        self._page_size = page_size
        self._language = language
        self._timeout = timeout
        self._client = client
        self._lock = asyncio.Lock()

    async def _http(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is None:
                self._client = httpx.AsyncClient(base_url=self._api_url, timeout=self._timeout)
            return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        client = await self._http()
        response = await client.get(path, params=params)
        logger.debug(f"MangaDex GET {path} -> {response.status_code}")
        if response.status_code == 404:
            raise UpstreamNotFoundError(f"Not found on MangaDex: {path}")
        response.raise_for_status()
        return response.json()

    # ─────────────────────────────────────────────
    # Преобразование ответов
    # ─────────────────────────────────────────────
    def cover_url(self, manga: Dict[str, Any]) -> Optional[str]:
        for rel in manga.get("relationships", []):
            if rel.get("type") == "cover_art" and rel.get("attributes"):
                file_name = rel["attributes"].get("fileName")
                if file_name:
                    return f"{self._uploads_url}/covers/{manga['id']}/{file_name}"
        return None

    def to_manga_summary(self, manga: Dict[str, Any]) -> Dict[str, Any]:
        attributes = manga.get("attributes", {})
        return {
            "id": manga["id"],
            "title": localized(attributes.get("title"), self._language),
            "altTitles": attributes.get("altTitles", []),
            "description": attributes.get("description", {}),
            "status": attributes.get("status"),
            "releaseDate": attributes.get("year"),
            "contentRating": attributes.get("contentRating"),
            "lastVolume": attributes.get("lastVolume") or None,
            "lastChapter": attributes.get("lastChapter") or None,
            "image": self.cover_url(manga),
        }

    @staticmethod
    def to_chapter(chapter: Dict[str, Any]) -> Dict[str, Any]:
        attributes = chapter.get("attributes", {})
        return {
            "id": chapter["id"],
            "title": attributes.get("title") or "",
            "chapterNumber": attributes.get("chapter"),
            "volumeNumber": attributes.get("volume"),
            "pages": attributes.get("pages", 0),
        }

    async def _listing(self, page: int, limit: int, order: str,
                       extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        page = max(page, 1)
        offset = (page - 1) * limit
        params: Dict[str, Any] = {
            "limit": limit,
            "offset": offset,
            "includes[]": ["cover_art"],
            f"order[{order}]": "desc",
        }
        if extra:
            params.update(extra)

        data = await self._get("/manga", params=params)
        return {
            "currentPage": page,
            "hasNextPage": offset + limit < data.get("total", 0),
            "results": [self.to_manga_summary(m) for m in data.get("data", [])],
        }

    # ─────────────────────────────────────────────
    # Операции провайдера
    # ─────────────────────────────────────────────
    async def search_manga(self, query: str, page: int, limit: int) -> Dict[str, Any]:
        with upstream_errors(f"Failed to search manga by name: {query}"):
            return await self._listing(page, limit, "relevance", {"title": query})

    async def fetch_latest_updates(self, page: int, limit: int) -> Dict[str, Any]:
        with upstream_errors("Failed to fetch recent manga chapters"):
            return await self._listing(page, limit, "latestUploadedChapter")

    async def fetch_recently_added(self, page: int) -> Dict[str, Any]:
        with upstream_errors("Failed to fetch recently added manga"):
            return await self._listing(page, self._page_size, "createdAt")

    async def fetch_popular(self, page: int) -> Dict[str, Any]:
        with upstream_errors("Failed to fetch popular manga"):
            return await self._listing(page, self._page_size, "followedCount")

    async def fetch_random(self) -> Dict[str, Any]:
        with upstream_errors("Failed to fetch random manga"):
            data = await self._get("/manga/random", params={"includes[]": ["cover_art"]})
            return {
                "currentPage": 1,
                "hasNextPage": False,
                "results": [self.to_manga_summary(data["data"])],
            }

    async def _fetch_chapters(self, manga_id: str) -> List[Dict[str, Any]]:
        chapters: List[Dict[str, Any]] = []
        offset = 0
        while True:
            data = await self._get(f"/manga/{path_segment(manga_id)}/feed", params={
                "limit": FEED_LIMIT,
                "offset": offset,
                "translatedLanguage[]": [self._language],
                "order[volume]": "asc",
                "order[chapter]": "asc",
            })
            batch = data.get("data", [])
            chapters.extend(self.to_chapter(c) for c in batch)
            offset += FEED_LIMIT
            if not batch or offset >= data.get("total", 0):
                return chapters

    async def fetch_manga_info(self, manga_id: str) -> Dict[str, Any]:
        with upstream_errors(f"Failed to fetch manga info for {manga_id}"):
            data = await self._get(
                f"/manga/{path_segment(manga_id)}", params={"includes[]": ["cover_art"]}
            )
            manga = data["data"]
            chapters = await self._fetch_chapters(manga_id)

            attributes = manga.get("attributes", {})
            return {
                **self.to_manga_summary(manga),
                "genres": tags_of(attributes, "genre", self._language),
                "themes": tags_of(attributes, "theme", self._language),
                "chapters": chapters,
            }

    async def fetch_chapter_pages(self, chapter_id: str) -> List[Dict[str, Any]]:
        with upstream_errors(f"Failed to fetch chapter pages for {chapter_id}"):
            data = await self._get(f"/at-home/server/{path_segment(chapter_id)}")
            base_url = data["baseUrl"]
            chapter = data["chapter"]

            return [
                {"img": f"{base_url}/data/{chapter['hash']}/{file_name}", "page": index}
                for index, file_name in enumerate(chapter.get("data", []), start=1)
            ]
