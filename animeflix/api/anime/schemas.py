from typing import List, Optional

from pydantic import Field

from animeflix.core.schemas import CamelModel, Page


class AnimeResult(CamelModel):
    id: str
    title: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None
    release_date: Optional[str] = None
    sub_or_dub: Optional[str] = None
    genres: List[str] = []
    status: Optional[str] = None
    rating: Optional[float] = None


class RecentEpisode(CamelModel):
    id: str
    episode_id: str
    episode_number: int
    title: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None


class TopAiringAnime(CamelModel):
    id: str
    title: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    genres: List[str] = []
    episode_id: str
    episode_number: int


class Episode(CamelModel):
    id: str
    number: int
    url: Optional[str] = None


class Translation(CamelModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None


class AnimeInfo(AnimeResult):
    description: Optional[str] = None
    type: Optional[str] = None
    other_name: Optional[str] = None
    total_episodes: int = 0
    translations: List[Translation] = []
    episodes: List[Episode] = []


class SourceHeaders(CamelModel):
    referer: str = Field(..., alias="Referer")


class VideoSource(CamelModel):
    url: str
    is_m3u8: bool = Field(..., alias="isM3U8")
    quality: str


class EpisodeSources(CamelModel):
    headers: SourceHeaders
    sources: List[VideoSource]
    download: Optional[str] = None


class EpisodeServer(CamelModel):
    name: str
    url: str


AnimeSearchPage = Page[AnimeResult]
RecentEpisodesPage = Page[RecentEpisode]
TopAiringPage = Page[TopAiringAnime]
