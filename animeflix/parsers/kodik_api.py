import asyncio
import logging
from typing import List, Dict, Any, Optional, Tuple

from anime_parsers_ru import KodikParserAsync, ShikimoriParserAsync
from anime_parsers_ru.errors import NoResults

from animeflix.core.errors import (
    InvalidParameterError, UpstreamNotFoundError, UpstreamUnavailableError, upstream_errors
)
from animeflix.parsers.base import build_page, compose_episode_id, split_episode_id

logger = logging.getLogger(__name__)

KODIK_REFERER = "https://kodik.info/"
HLS_QUALITIES = (360, 480, 720, 1080)
LIST_ROWS_PER_REQUEST = 100
SEARCH_ROWS_PER_ITEM = 5
SEARCH_LIMIT = 100
SERVER_CONCURRENCY = 5
POPULAR_STUDIOS = ["AniLibria", "AniDUB", "Animedia", "AniStar"]


# ═══════════════════════════════════════════
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# ═══════════════════════════════════════════

def normalize_shikimori_id(raw_id: Any) -> Optional[str]:
    """Приводит shikimori_id к формату Kodik (z123)"""
    if raw_id is None or raw_id == "":
        return None
    sid = str(raw_id)
    if not sid.startswith("z"):
        sid = f"z{sid}"
    return sid


def get_clean_shikimori_id(raw_id: Any) -> Optional[str]:
    """Получает чистый shikimori_id без префикса z (для Shikimori API)"""
    if raw_id is None:
        return None
    sid = str(raw_id)
    if sid.startswith("z"):
        sid = sid[1:]
    return sid


def absolute_url(url: Optional[str]) -> Optional[str]:
    if url and url.startswith("//"):
        return f"https:{url}"
    return url


def hls_url(base: str, quality: int) -> str:
    """Kodik отдаёт базовую ссылку, к которой дописывается качество"""
    return f"{base}{quality}.mp4:hls:manifest.m3u8"


def pick_poster(item: Dict[str, Any]) -> Optional[str]:
    material = item.get("material_data") or {}
    poster = material.get("anime_poster_url") or material.get("poster_url")
    if not poster and item.get("screenshots"):
        poster = item["screenshots"][0]
    return poster


def sub_or_dub(item: Dict[str, Any]) -> str:
    translation = item.get("translation") or {}
    return "sub" if translation.get("type") == "subtitles" else "dub"


def group_by_shikimori(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Kodik возвращает по строке на каждую озвучку.
    Оставляем первую строку для каждого shikimori_id, порядок сохраняется.
    """
    grouped: Dict[str, Dict[str, Any]] = {}
    for item in items or []:
        shiki_id = normalize_shikimori_id(item.get("shikimori_id"))
        if not shiki_id or shiki_id in grouped:
            continue
        grouped[shiki_id] = item
    return list(grouped.values())


def sort_translations(translations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Убирает дубли по имени, популярные студии идут первыми"""
    seen_names = set()
    unique_translations = []

    for t in translations:
        name = (t.get("name") or "").strip()
        if name and name not in seen_names:
            seen_names.add(name)
            unique_translations.append(t)

    unique_translations.sort(
        key=lambda x: (
            POPULAR_STUDIOS.index(x["name"]) if x["name"] in POPULAR_STUDIOS else 999,
            -int(x.get("id") or 0)
        )
    )
    return unique_translations


def episode_number_of(item: Dict[str, Any]) -> int:
    """Последняя вышедшая серия, 0 для фильмов"""
    material = item.get("material_data") or {}
    return int(item.get("last_episode") or material.get("episodes_aired") or 0)


def to_anime_summary(item: Dict[str, Any]) -> Dict[str, Any]:
    material = item.get("material_data") or {}
    year = item.get("year")
    return {
        "id": normalize_shikimori_id(item.get("shikimori_id")),
        "title": item.get("title"),
        "url": absolute_url(item.get("link")),
        "image": pick_poster(item),
        "releaseDate": str(year) if year else None,
        "subOrDub": sub_or_dub(item),
        "genres": material.get("anime_genres") or material.get("genres") or [],
        "status": material.get("anime_status"),
        "rating": material.get("shikimori_rating"),
    }


def to_recent_episode(item: Dict[str, Any]) -> Dict[str, Any]:
    shiki_id = normalize_shikimori_id(item.get("shikimori_id"))
    number = episode_number_of(item)
    return {
        "id": shiki_id,
        "episodeId": compose_episode_id(shiki_id, str(number)),
        "episodeNumber": number,
        "title": item.get("title"),
        "image": pick_poster(item),
        "url": absolute_url(item.get("link")),
    }


def to_top_airing(item: Dict[str, Any]) -> Dict[str, Any]:
    summary = to_anime_summary(item)
    recent = to_recent_episode(item)
    return {
        "id": summary["id"],
        "title": summary["title"],
        "image": summary["image"],
        "url": summary["url"],
        "genres": summary["genres"],
        "episodeId": recent["episodeId"],
        "episodeNumber": recent["episodeNumber"],
    }


# ═══════════════════════════════════════════
# ПРОВАЙДЕР
# ═══════════════════════════════════════════

class KodikAnimeProvider:
    """
    Источник аниме поверх anime_parsers_ru.

    Серии и ссылки берутся из Kodik, постеры для карточки аниме из Shikimori.
    Парсеры создаются лениво при первом запросе.
    """
    name = "kodik"

    def __init__(self, token: Optional[str] = None, page_size: int = 20, max_page: int = 50,
                 kodik: Optional[KodikParserAsync] = None,
                 shikimori: Optional[ShikimoriParserAsync] = None):
        self._token = token
        self._page_size = page_size
        self._max_page = max_page
        self._kodik = kodik
        self._shikimori = shikimori
        self._lock = asyncio.Lock()

    async def _kodik_parser(self) -> KodikParserAsync:
        async with self._lock:
            if self._kodik is None:
                kwargs: Dict[str, Any] = {"validate_token": False}
                if self._token:
                    kwargs["token"] = self._token
                self._kodik = KodikParserAsync(**kwargs)
            return self._kodik

    async def _shikimori_parser(self) -> ShikimoriParserAsync:
        async with self._lock:
            if self._shikimori is None:
                self._shikimori = ShikimoriParserAsync()
            return self._shikimori

    async def aclose(self) -> None:
        # aiohttp сессии живут внутри вызовов anime_parsers_ru
        return None

    def _check_page(self, page: int) -> int:
        """
        Kodik не умеет начинать список с середины: страница N стоит N запросов.
        Поэтому номер страницы ограничен сверху, а всё что меньше 1 считается первой.
        """
        if page > self._max_page:
            raise InvalidParameterError(f"Page must not be greater than {self._max_page}")
        return max(page, 1)

    # ─────────────────────────────────────────────
    # 🔍 ПОИСК
    # ─────────────────────────────────────────────
    async def search_anime(self, query: str, page: int) -> Dict[str, Any]:
        page = self._check_page(page)

        with upstream_errors(f"Failed to search anime by name: {query}"):
            parser = await self._kodik_parser()
            try:
                rows = await parser.search(
                    title=query,
                    limit=min(self._page_size * page * SEARCH_ROWS_PER_ITEM, SEARCH_LIMIT),
                    include_material_data=True,
                    only_anime=True,
                    strict=False
                )
            except NoResults:
                rows = []

            items = [to_anime_summary(item) for item in group_by_shikimori(rows)]

        logger.debug(f"Kodik search '{query}': {len(rows)} rows, {len(items)} anime")
        return build_page(items, page, self._page_size)

    # ─────────────────────────────────────────────
    # 📃 СПИСКИ
    # ─────────────────────────────────────────────
    async def _load_list(self, page: int) -> Tuple[List[Dict[str, Any]], bool]:
        parser = await self._kodik_parser()
        rows, next_page = await parser.get_list(
            limit_per_page=LIST_ROWS_PER_REQUEST,
            pages_to_parse=page,
            include_material_data=True,
            only_anime=True
        )
        return group_by_shikimori(rows), next_page is not None

    def _page_of(self, items: List[Dict[str, Any]], page: int, has_more_upstream: bool) -> Dict[str, Any]:
        result = build_page(items, page, self._page_size)
        result["hasNextPage"] = result["hasNextPage"] or has_more_upstream
        return result

    async def fetch_recent_episodes(self, page: int) -> Dict[str, Any]:
        page = self._check_page(page)
        with upstream_errors("Failed to fetch recent episodes"):
            items, has_more = await self._load_list(page)
            return self._page_of([to_recent_episode(item) for item in items], page, has_more)

    async def fetch_top_airing(self, page: int) -> Dict[str, Any]:
        page = self._check_page(page)
        with upstream_errors("Failed to fetch top airing animes"):
            items, has_more = await self._load_list(page)

            ongoing = [
                item for item in items
                if (item.get("material_data") or {}).get("anime_status") == "ongoing"
            ]
            ongoing.sort(
                key=lambda item: float((item.get("material_data") or {}).get("shikimori_rating") or 0),
                reverse=True
            )
            return self._page_of([to_top_airing(item) for item in ongoing], page, has_more)

    async def fetch_anime_list(self, page: int) -> Dict[str, Any]:
        page = self._check_page(page)
        with upstream_errors("Failed to fetch anime list"):
            items, has_more = await self._load_list(page)
            return self._page_of([to_anime_summary(item) for item in items], page, has_more)

    # ─────────────────────────────────────────────
    # 📄 ИНФОРМАЦИЯ ОБ АНИМЕ
    # ─────────────────────────────────────────────
    async def _resolve_shikimori_id(self, parser: KodikParserAsync, anime_id: str) -> str:
        """
        Принимает shikimori_id (20 или z20) либо слаг названия (one-piece).
        Слаг ищется в Kodik, берётся первый найденный тайтл.
        """
        clean_id = get_clean_shikimori_id(anime_id)
        if clean_id and clean_id.isdigit():
            return normalize_shikimori_id(clean_id)

        rows = await parser.search(
            title=anime_id.replace("-", " "),
            limit=SEARCH_ROWS_PER_ITEM,
            include_material_data=False,
            only_anime=True,
            strict=False
        )
        for item in rows:
            shiki_id = normalize_shikimori_id(item.get("shikimori_id"))
            if shiki_id:
                return shiki_id
        raise UpstreamNotFoundError(f"Anime not found: {anime_id}")

    async def _translations(self, parser: KodikParserAsync,
                            shiki_id: str) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        info = await parser.get_info(id=shiki_id, id_type="shikimori")
        return info, sort_translations(info.get("translations", []))

    async def _poster_from_shikimori(self, shiki_id: str) -> Optional[str]:
        """Постер из Shikimori, None если не удалось"""
        try:
            parser = await self._shikimori_parser()
            info = await parser.deep_anime_info(
                shikimori_id=get_clean_shikimori_id(shiki_id),
                return_parameters=['poster { originalUrl }']
            )
        except Exception as e:
            logger.warning(f"Shikimori poster for {shiki_id} unavailable: {e!r}")
            return None

        poster = (info or {}).get("poster")
        if isinstance(poster, dict):
            return poster.get("originalUrl")
        return poster

    async def fetch_anime_info(self, anime_id: str) -> Dict[str, Any]:
        with upstream_errors(f"Failed to fetch anime info for {anime_id}", not_found=(NoResults,)):
            parser = await self._kodik_parser()
            shiki_id = await self._resolve_shikimori_id(parser, anime_id)
            found = await parser.search_by_id(id=shiki_id, id_type="shikimori", limit=1)
            if not found:
                raise UpstreamNotFoundError(f"Anime not found: {anime_id}")
            info, translations = await self._translations(parser, shiki_id)

            anime = found[0]
            material = anime.get("material_data") or {}
            summary = to_anime_summary(anime)
            poster = await self._poster_from_shikimori(shiki_id) or summary["image"]

            series_count = int(info.get("series_count") or 0)
            numbers = range(1, series_count + 1) if series_count else [0]
            player = summary["url"]

            return {
                **summary,
                "image": poster,
                "description": material.get("anime_description") or material.get("description"),
                "type": material.get("anime_kind") or anime.get("type"),
                "otherName": material.get("title_en") or anime.get("title_orig"),
                "totalEpisodes": series_count,
                "translations": [
                    {"id": str(t.get("id")), "name": t.get("name"), "type": t.get("type")}
                    for t in translations
                ],
                "episodes": [
                    {
                        "id": compose_episode_id(shiki_id, str(n)),
                        "number": n,
                        "url": f"{player}?episode={n}" if player and n else player,
                    }
                    for n in numbers
                ],
            }

    # ─────────────────────────────────────────────
    # 🎬 ИСТОЧНИКИ ВИДЕО
    # ─────────────────────────────────────────────
    @staticmethod
    async def _link(parser: KodikParserAsync, shiki_id: str, number: int,
                    translation_id: str) -> Tuple[str, int]:
        """
        Базовая ссылка на серию и максимальное качество.
        Новые версии get_link дописывают в ответ ещё и отрезки для пропуска, они не нужны.
        """
        link, max_quality, *_ = await parser.get_link(
            id=shiki_id,
            id_type="shikimori",
            seria_num=number,
            translation_id=translation_id
        )
        return absolute_url(link), int(max_quality)

    async def fetch_episode_sources(self, episode_id: str,
                                    translation_id: Optional[str] = None) -> Dict[str, Any]:
        anime_id, number = split_episode_id(episode_id)

        with upstream_errors(f"Failed to fetch episode sources for {episode_id}", not_found=(NoResults,)):
            parser = await self._kodik_parser()
            shiki_id = await self._resolve_shikimori_id(parser, anime_id)
            if translation_id is None:
                _, translations = await self._translations(parser, shiki_id)
                if not translations:
                    raise UpstreamNotFoundError(f"No translations for {episode_id}")
                translation_id = str(translations[0]["id"])

            base, max_quality = await self._link(parser, shiki_id, number, str(translation_id))

        qualities = [q for q in HLS_QUALITIES if q <= max_quality] or [max_quality]

        return {
            "headers": {"Referer": KODIK_REFERER},
            "sources": [
                {"url": hls_url(base, q), "isM3U8": True, "quality": f"{q}p"}
                for q in qualities
            ],
            "download": f"{base}{max_quality}.mp4",
        }

    async def fetch_episode_servers(self, episode_id: str) -> List[Dict[str, Any]]:
        """Каждая озвучка Kodik отдаётся как отдельный сервер"""
        anime_id, number = split_episode_id(episode_id)
        message = f"Failed to fetch episode servers for episode {episode_id}"

        with upstream_errors(message, not_found=(NoResults,)):
            parser = await self._kodik_parser()
            shiki_id = await self._resolve_shikimori_id(parser, anime_id)
            _, translations = await self._translations(parser, shiki_id)

            # Ограничиваем параллельные запросы чтобы не перегрузить Kodik
            semaphore = asyncio.Semaphore(SERVER_CONCURRENCY)

            async def resolve(translation: Dict[str, Any]) -> Dict[str, str]:
                async with semaphore:
                    base, quality = await self._link(parser, shiki_id, number, str(translation["id"]))
                return {"name": translation["name"], "url": hls_url(base, quality)}

            results = await asyncio.gather(*(resolve(t) for t in translations), return_exceptions=True)

        servers = []
        for translation, result in zip(translations, results):
            if isinstance(result, BaseException):
                logger.debug(f"Translation {translation.get('name')} unavailable for {episode_id}: {result!r}")
                continue
            servers.append(result)

        if translations and not servers:
            raise UpstreamUnavailableError(message)
        return servers
