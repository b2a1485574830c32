from typing import Any, Dict, Generic, List, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class Page(CamelModel, Generic[T]):
    current_page: int = Field(..., description="Номер текущей страницы")
    has_next_page: bool = Field(False, description="Есть ли следующая страница")
    results: List[T]


class ErrorResponse(BaseModel):
    name: str = Field(..., description="Тип ошибки")
    message: str = Field(..., description="Описание ошибки")


# Схемы ошибок, общие для всех маршрутов (только для документации)
ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing or invalid query parameter."},
    404: {"model": ErrorResponse, "description": "Content not found upstream."},
    502: {"model": ErrorResponse, "description": "Upstream provider failed."},
}
