import re
from typing import Optional

from animeflix.core.errors import InvalidParameterError, MissingParameterError

DEFAULT_PAGE = 1

# Префикс как у parseInt: пробелы, знак, цифры, дальше что угодно
_LENIENT_INT = re.compile(r"\s*([+-]?\d+)")
_STRICT_INT = re.compile(r"\s*[+-]?\d+\s*")


def require(value: Optional[str], message: str) -> str:
    """Возвращает значение или бросает MissingParameterError для None и пустой строки"""
    if not value:
        raise MissingParameterError(message)
    return value


def parse_page(value: Optional[str], strict: bool = False) -> int:
    """
    Приводит параметр page к числу.

    Пустое значение -> 1. В мягком режиме "2abc" -> 2,
    в строгом вся строка должна быть целым числом.
    """
    if not value:
        return DEFAULT_PAGE

    if strict:
        if not _STRICT_INT.fullmatch(value):
            raise InvalidParameterError("Page must be a number")
        return int(value)

    match = _LENIENT_INT.match(value)
    if not match:
        raise InvalidParameterError("Page must be a number")
    return int(match.group(1))
