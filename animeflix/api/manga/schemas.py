from typing import Any, Dict, List, Optional

from animeflix.core.schemas import CamelModel, Page


class MangaResult(CamelModel):
    id: str
    title: Optional[str] = None
    alt_titles: List[Dict[str, Any]] = []
    description: Dict[str, Any] = {}
    status: Optional[str] = None
    release_date: Optional[int] = None
    content_rating: Optional[str] = None
    last_volume: Optional[str] = None
    last_chapter: Optional[str] = None
    image: Optional[str] = None


class Chapter(CamelModel):
    id: str
    title: str = ""
    chapter_number: Optional[str] = None
    volume_number: Optional[str] = None
    pages: int = 0


class MangaInfo(MangaResult):
    genres: List[str] = []
    themes: List[str] = []
    chapters: List[Chapter] = []


class ChapterPage(CamelModel):
    img: str
    page: int


MangaPage = Page[MangaResult]
