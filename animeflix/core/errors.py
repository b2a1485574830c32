"""
Иерархия ошибок Animeflix.

Каждая ошибка знает свой HTTP статус и отдаётся клиенту как {name, message}.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Tuple, Type

logger = logging.getLogger(__name__)


class AnimeflixError(Exception):
    """Базовая ошибка API"""
    http_status: int = 500

    def __init__(self, message: str, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_response(self) -> Dict[str, str]:
        return {"name": self.name, "message": self.message}


class MissingParameterError(AnimeflixError):
    """Не передан обязательный параметр запроса"""
    http_status = 400


class InvalidParameterError(AnimeflixError):
    """Параметр передан, но в неверном формате"""
    http_status = 400


class UpstreamError(AnimeflixError):
    """Ошибка на стороне источника данных"""
    http_status = 502


class UpstreamUnavailableError(UpstreamError):
    http_status = 502


class UpstreamNotFoundError(UpstreamError):
    http_status = 404


@contextmanager
def upstream_errors(message: str, not_found: Tuple[Type[BaseException], ...] = ()) -> Iterator[None]:
    """
    Переводит исключения источника в ошибки API.

    Вызов к источнику должен быть awaited внутри блока, иначе
    отклонённая корутина вылетит уже после выхода из него.

    Args:
        message: Сообщение для клиента
        not_found: Исключения источника, означающие "ничего не найдено"
    """
    try:
        yield
    except AnimeflixError:
        raise
    except not_found as e:
        logger.info(f"{message}: {e!r}")
        raise UpstreamNotFoundError(message) from e
    except Exception as e:
        logger.warning(f"{message}: {e!r}")
        raise UpstreamUnavailableError(message) from e
