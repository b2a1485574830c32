from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from animeflix.api.manga.schemas import ChapterPage, MangaInfo, MangaPage
from animeflix.api.manga.service import MangaService
from animeflix.core.schemas import ERROR_RESPONSES

router = APIRouter(prefix="/manga", tags=["/manga"])

PAGE_DESCRIPTION = "The page number to retrieve. Ex: 1 (default)"


def get_manga_service(request: Request) -> MangaService:
    return request.app.state.manga_service


@router.get(
    "/search",
    summary="Search for a manga by query",
    responses={200: {"model": MangaPage, "description": "Search results retrieved correctly by query."},
               **ERROR_RESPONSES},
)
async def search_manga(
        q: Optional[str] = Query(None, description="The query to search for. Ex: evangelion"),
        page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
        service: MangaService = Depends(get_manga_service)
):
    return await service.search_manga_by_query(q, page)


@router.get(
    "/info",
    summary="Get manga info by id",
    responses={200: {"model": MangaInfo, "description": "Manga info retrieved correctly."},
               **ERROR_RESPONSES},
)
async def manga_info(
        manga_id: Optional[str] = Query(
            None, alias="mangaId",
            description="The manga id to retrieve. Ex: aaedcbda-ea61-4e7b-8143-7a475f327fbf"
        ),
        service: MangaService = Depends(get_manga_service)
):
    return await service.get_manga_info(manga_id)


@router.get(
    "/list",
    summary="Get recently added manga",
    responses={200: {"model": MangaPage, "description": "Manga list retrieved correctly."},
               **ERROR_RESPONSES},
)
async def manga_list(page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
                     service: MangaService = Depends(get_manga_service)):
    return await service.get_manga_list(page)


@router.get(
    "/recent",
    summary="Get latest manga updates",
    responses={200: {"model": MangaPage, "description": "Recent manga retrieved correctly."},
               **ERROR_RESPONSES},
)
async def recent_manga(page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
                       service: MangaService = Depends(get_manga_service)):
    return await service.get_recent_manga(page)


@router.get(
    "/popular",
    summary="Get popular manga",
    responses={200: {"model": MangaPage, "description": "Popular manga retrieved correctly."},
               **ERROR_RESPONSES},
)
async def popular_manga(page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
                        service: MangaService = Depends(get_manga_service)):
    return await service.get_popular_manga(page)


@router.get(
    "/random",
    summary="Get a random manga",
    responses={200: {"model": MangaPage, "description": "Random manga retrieved correctly."},
               **ERROR_RESPONSES},
)
async def random_manga(service: MangaService = Depends(get_manga_service)):
    return await service.get_random_manga()


@router.get(
    "/chapter/pages",
    summary="Get the pages of a chapter",
    responses={200: {"model": List[ChapterPage], "description": "Chapter pages retrieved correctly."},
               **ERROR_RESPONSES},
)
async def chapter_pages(
        chapter_id: Optional[str] = Query(None, alias="chapterId", description="The chapter id to retrieve"),
        service: MangaService = Depends(get_manga_service)
):
    return await service.get_chapter_pages(chapter_id)
