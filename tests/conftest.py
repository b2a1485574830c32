"""Общие фикстуры: заглушки провайдеров и тестовый клиент"""
import pytest
from fastapi.testclient import TestClient

from animeflix.core.config import Settings
from animeflix.main import create_app
from fakes import FakeAnimeProvider, FakeMangaProvider


@pytest.fixture
def anime_provider():
    return FakeAnimeProvider()


@pytest.fixture
def manga_provider():
    return FakeMangaProvider()


@pytest.fixture
def settings():
    return Settings(LOG_LEVEL="DEBUG")


@pytest.fixture
def app(settings, anime_provider, manga_provider):
    return create_app(settings, anime_provider=anime_provider, manga_provider=manga_provider)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
