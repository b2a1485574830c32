import pytest

from animeflix.api.anime.service import AnimeService
from animeflix.api.manga.service import MangaService
from animeflix.core.errors import InvalidParameterError, MissingParameterError
from fakes import FakeAnimeProvider, FakeMangaProvider


@pytest.fixture
def anime():
    return AnimeService(FakeAnimeProvider())


@pytest.fixture
def manga():
    return MangaService(FakeMangaProvider(), page_size=10)


class TestAnimeService:
    @pytest.mark.parametrize("query", [None, ""])
    async def test_search_requires_query(self, anime, query):
        with pytest.raises(MissingParameterError):
            await anime.search_anime_by_query(query, "1")
        assert anime.provider.calls == []

    async def test_search_passes_integer_page(self, anime):
        await anime.search_anime_by_query("naruto", "2")
        assert anime.provider.calls == [("search_anime", ("naruto", 2))]

    async def test_search_without_page_equals_first_page(self, anime):
        await anime.search_anime_by_query("naruto", None)
        await anime.search_anime_by_query("naruto", "1")
        assert anime.provider.calls[0] == anime.provider.calls[1]

    @pytest.mark.parametrize("method", ["get_recent_episodes", "get_top_airing", "get_anime_list"])
    async def test_paginated_methods(self, anime, method):
        service_call = getattr(anime, method)
        await service_call(None)
        await service_call("2")
        assert [args for _, args in anime.provider.calls] == [(1,), (2,)]

        with pytest.raises(InvalidParameterError):
            await service_call("abc")
        assert len(anime.provider.calls) == 2

    async def test_episode_sources_composes_id(self, anime):
        await anime.get_episode_sources("One-Piece", "1")
        assert anime.provider.calls == [("fetch_episode_sources", ("One-Piece-episode-1", None))]

    async def test_episode_sources_passes_translation(self, anime):
        await anime.get_episode_sources("z21", "3", "610")
        assert anime.provider.calls == [("fetch_episode_sources", ("z21-episode-3", "610"))]

    @pytest.mark.parametrize("name, number", [(None, "1"), ("", "1"), ("one-piece", None), ("one-piece", "")])
    async def test_episode_sources_requires_both(self, anime, name, number):
        with pytest.raises(MissingParameterError):
            await anime.get_episode_sources(name, number)
        assert anime.provider.calls == []

    async def test_episode_servers(self, anime):
        with pytest.raises(MissingParameterError):
            await anime.get_episode_servers("")
        await anime.get_episode_servers("one-piece-episode-1")
        assert anime.provider.calls == [("fetch_episode_servers", ("one-piece-episode-1",))]

    async def test_anime_info(self, anime):
        with pytest.raises(MissingParameterError):
            await anime.get_anime_info(None)
        await anime.get_anime_info("z21")
        assert anime.provider.calls == [("fetch_anime_info", ("z21",))]

    async def test_returns_provider_result_unmodified(self, anime):
        page = {"currentPage": 2, "hasNextPage": True, "results": [{"id": "z1"}]}
        anime.provider.results["search_anime"] = page
        assert await anime.search_anime_by_query("naruto", "2") is page

    async def test_strict_pages(self):
        service = AnimeService(FakeAnimeProvider(), strict_pages=True)
        with pytest.raises(InvalidParameterError):
            await service.get_anime_list("2abc")


class TestMangaService:
    @pytest.mark.parametrize("query", [None, ""])
    async def test_search_requires_query(self, manga, query):
        with pytest.raises(MissingParameterError):
            await manga.search_manga_by_query(query, None)
        assert manga.provider.calls == []

    async def test_search_uses_page_size(self, manga):
        await manga.search_manga_by_query("evangelion", None)
        assert manga.provider.calls == [("search_manga", ("evangelion", 1, 10))]

    async def test_lists(self, manga):
        await manga.get_manga_list(None)
        await manga.get_recent_manga("3")
        await manga.get_popular_manga("2")
        assert manga.provider.calls == [
            ("fetch_recently_added", (1,)),
            ("fetch_latest_updates", (3, 10)),
            ("fetch_popular", (2,)),
        ]

    async def test_invalid_page(self, manga):
        with pytest.raises(InvalidParameterError):
            await manga.get_popular_manga("abc")
        assert manga.provider.calls == []

    async def test_random_takes_no_arguments(self, manga):
        await manga.get_random_manga()
        assert manga.provider.calls == [("fetch_random", ())]

    async def test_info_and_chapter_pages(self, manga):
        with pytest.raises(MissingParameterError):
            await manga.get_manga_info("")
        with pytest.raises(MissingParameterError):
            await manga.get_chapter_pages(None)

        await manga.get_manga_info("aaedcbda")
        await manga.get_chapter_pages("ch-1")
        assert manga.provider.calls == [
            ("fetch_manga_info", ("aaedcbda",)),
            ("fetch_chapter_pages", ("ch-1",)),
        ]
