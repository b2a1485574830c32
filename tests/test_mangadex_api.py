import httpx
import pytest

from animeflix.core.errors import InvalidParameterError, UpstreamNotFoundError, UpstreamUnavailableError
from animeflix.parsers.mangadex_api import MangaDexProvider

MANGA = {
    "id": "aaedcbda",
    "type": "manga",
    "attributes": {
        "title": {"en": "Neon Genesis Evangelion"},
        "altTitles": [{"ja": "新世紀エヴァンゲリオン"}],
        "description": {"en": "Shinji..."},
        "status": "completed",
        "year": 1995,
        "contentRating": "safe",
        "lastVolume": "14",
        "lastChapter": "",
        "tags": [
            {"attributes": {"name": {"en": "Mecha"}, "group": "genre"}},
            {"attributes": {"name": {"en": "Military"}, "group": "theme"}},
        ],
    },
    "relationships": [
        {"id": "author-1", "type": "author"},
        {"id": "cover-1", "type": "cover_art", "attributes": {"fileName": "cover.jpg"}},
    ],
}


def make_provider(handler):
    client = httpx.AsyncClient(base_url="https://api.test", transport=httpx.MockTransport(handler))
    return MangaDexProvider(api_url="https://api.test", uploads_url="https://uploads.test", client=client)


async def test_search_maps_results_and_paging():
    seen = {}

    def handler(request: httpx.Request):
        seen["path"] = request.url.path
        seen["params"] = request.url.params
        return httpx.Response(200, json={"data": [MANGA], "limit": 10, "offset": 10, "total": 25})

    provider = make_provider(handler)
    page = await provider.search_manga("evangelion", 2, 10)

    assert seen["path"] == "/manga"
    assert seen["params"]["title"] == "evangelion"
    assert seen["params"]["offset"] == "10"
    assert seen["params"].get_list("includes[]") == ["cover_art"]
    assert seen["params"]["order[relevance]"] == "desc"

    assert page["currentPage"] == 2
    assert page["hasNextPage"] is True
    result = page["results"][0]
    assert result["title"] == "Neon Genesis Evangelion"
    assert result["image"] == "https://uploads.test/covers/aaedcbda/cover.jpg"
    assert result["releaseDate"] == 1995
    assert result["lastChapter"] is None


async def test_popular_last_page_has_no_next():
    def handler(request):
        assert request.url.params["order[followedCount]"] == "desc"
        return httpx.Response(200, json={"data": [MANGA], "total": 11})

    page = await make_provider(handler).fetch_popular(2)
    assert page["hasNextPage"] is False


async def test_random_is_wrapped_in_page():
    def handler(request):
        assert request.url.path == "/manga/random"
        return httpx.Response(200, json={"data": MANGA})

    page = await make_provider(handler).fetch_random()
    assert page["currentPage"] == 1
    assert [m["id"] for m in page["results"]] == ["aaedcbda"]


async def test_info_collects_tags_and_chapters():
    chapters = [
        {"id": f"ch-{n}", "attributes": {"chapter": str(n), "volume": "1", "title": None, "pages": 20}}
        for n in range(1, 4)
    ]

    def handler(request):
        if request.url.path.endswith("/feed"):
            assert request.url.params.get_list("translatedLanguage[]") == ["en"]
            return httpx.Response(200, json={"data": chapters, "total": 3})
        return httpx.Response(200, json={"data": MANGA})

    info = await make_provider(handler).fetch_manga_info("aaedcbda")

    assert info["genres"] == ["Mecha"]
    assert info["themes"] == ["Military"]
    assert [c["chapterNumber"] for c in info["chapters"]] == ["1", "2", "3"]
    assert info["chapters"][0] == {
        "id": "ch-1", "title": "", "chapterNumber": "1", "volumeNumber": "1", "pages": 20,
    }


async def test_chapter_pages():
    def handler(request):
        assert request.url.path == "/at-home/server/ch-1"
        return httpx.Response(200, json={
            "baseUrl": "https://node.test",
            "chapter": {"hash": "abc", "data": ["1.png", "2.png"]},
        })

    pages = await make_provider(handler).fetch_chapter_pages("ch-1")
    assert pages == [
        {"img": "https://node.test/data/abc/1.png", "page": 1},
        {"img": "https://node.test/data/abc/2.png", "page": 2},
    ]


async def test_not_found():
    provider = make_provider(lambda request: httpx.Response(404, json={"result": "error"}))

    with pytest.raises(UpstreamNotFoundError):
        await provider.fetch_manga_info("missing")


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"result": "error"}),
    httpx.Response(503, text="maintenance"),
])
async def test_server_errors_become_unavailable(response):
    provider = make_provider(lambda request: response)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await provider.fetch_recently_added(1)
    assert exc_info.value.message == "Failed to fetch recently added manga"


async def test_network_error_becomes_unavailable():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(UpstreamUnavailableError):
        await make_provider(handler).search_manga("x", 1, 10)


async def test_aclose_closes_client():
    provider = make_provider(lambda request: httpx.Response(200, json={}))
    client = await provider._http()

    await provider.aclose()

    assert client.is_closed


async def test_ids_stay_inside_their_path_segment():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={"baseUrl": "https://node.test", "chapter": {"hash": "abc", "data": []}})

    await make_provider(handler).fetch_chapter_pages("../../manga?title=x#")

    assert seen[0].raw_path == b"/at-home/server/..%2F..%2Fmanga%3Ftitle%3Dx%23"
    assert "title" not in seen[0].params


@pytest.mark.parametrize("manga_id", [".", ".."])
async def test_dot_ids_are_rejected(manga_id):
    def handler(request):
        raise AssertionError(f"unexpected request {request.url}")

    with pytest.raises(InvalidParameterError):
        await make_provider(handler).fetch_manga_info(manga_id)


async def test_malformed_chapter_payload_is_unavailable():
    provider = make_provider(lambda request: httpx.Response(200, json={"baseUrl": "https://node.test"}))

    with pytest.raises(UpstreamUnavailableError):
        await provider.fetch_chapter_pages("ch-1")


async def test_page_below_one_is_first_page():
    seen = {}

    def handler(request):
        seen["offset"] = request.url.params["offset"]
        return httpx.Response(200, json={"data": [], "total": 0})

    page = await make_provider(handler).fetch_popular(-3)

    assert seen["offset"] == "0"
    assert page["currentPage"] == 1
