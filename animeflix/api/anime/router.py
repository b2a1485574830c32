from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from animeflix.api.anime.schemas import (
    AnimeInfo, AnimeSearchPage, EpisodeServer, EpisodeSources, RecentEpisodesPage, TopAiringPage
)
from animeflix.api.anime.service import AnimeService
from animeflix.core.schemas import ERROR_RESPONSES

router = APIRouter(prefix="/anime", tags=["/anime"])

PAGE_DESCRIPTION = "The page number to retrieve. Ex: 1 (default)"


def get_anime_service(request: Request) -> AnimeService:
    return request.app.state.anime_service


@router.get(
    "/search",
    summary="Search for an anime by query",
    responses={200: {"model": AnimeSearchPage, "description": "Search results retrieved correctly by query."},
               **ERROR_RESPONSES},
)
async def search_anime(
        q: Optional[str] = Query(None, description="The query to search for. Ex: evangelion"),
        page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
        service: AnimeService = Depends(get_anime_service)
):
    return await service.search_anime_by_query(q, page)


@router.get(
    "/episode/sources",
    summary="Get episode sources by anime id and episode number",
    responses={200: {"model": EpisodeSources, "description": "Episode sources retrieved correctly."},
               **ERROR_RESPONSES},
)
async def episode_sources(
        anime_name: Optional[str] = Query(None, alias="animeName",
                                          description="The anime id to search for. Ex: one-piece or z21"),
        episode_number: Optional[str] = Query(None, alias="episodeNumber",
                                              description="The episode number. Ex: 1"),
        translation_id: Optional[str] = Query(None, alias="translationId",
                                              description="Translation to use, first available if omitted"),
        service: AnimeService = Depends(get_anime_service)
):
    return await service.get_episode_sources(anime_name, episode_number, translation_id)


@router.get(
    "/episode/servers",
    summary="Get episode servers by episode id",
    responses={200: {"model": List[EpisodeServer], "description": "Episode servers retrieved correctly."},
               **ERROR_RESPONSES},
)
async def episode_servers(
        episode_id: Optional[str] = Query(
            None, alias="episodeId",
            description="Composed as '<anime-id>-episode-<episode-number>'. Ex: one-piece-episode-1"
        ),
        service: AnimeService = Depends(get_anime_service)
):
    return await service.get_episode_servers(episode_id)


@router.get(
    "/recent",
    summary="Get recent episodes",
    responses={200: {"model": RecentEpisodesPage, "description": "Recent episodes retrieved correctly."},
               **ERROR_RESPONSES},
)
async def recent_episodes(page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
                          service: AnimeService = Depends(get_anime_service)):
    return await service.get_recent_episodes(page)


@router.get(
    "/top",
    summary="Get top airing animes",
    responses={200: {"model": TopAiringPage, "description": "Top airing animes retrieved correctly."},
               **ERROR_RESPONSES},
)
async def top_airing(page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
                     service: AnimeService = Depends(get_anime_service)):
    return await service.get_top_airing(page)


@router.get(
    "/list",
    summary="Get anime list",
    responses={200: {"model": AnimeSearchPage, "description": "Anime list retrieved correctly."},
               **ERROR_RESPONSES},
)
async def anime_list(page: Optional[str] = Query(None, description=PAGE_DESCRIPTION),
                     service: AnimeService = Depends(get_anime_service)):
    return await service.get_anime_list(page)


# Должен быть последним, иначе перехватит /recent, /top и т.д.
@router.get(
    "/{animeName}",
    summary="Get anime info by id",
    responses={200: {"model": AnimeInfo, "description": "Anime info retrieved correctly."},
               **ERROR_RESPONSES},
)
async def anime_info(animeName: str, service: AnimeService = Depends(get_anime_service)):
    return await service.get_anime_info(animeName)
