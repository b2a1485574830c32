import os
import time
from typing import Dict, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from animeflix.core.schemas import CamelModel

router = APIRouter(prefix="/health", tags=["/health"])

STARTED_AT = time.monotonic()


class HealthStatus(BaseModel):
    status: str


class CpuUsage(BaseModel):
    user: int
    system: int


class HealthInfo(CamelModel):
    cpu_usage: CpuUsage
    total_memory: Optional[int] = None
    free_memory: Optional[int] = None
    uptime: float


def _memory() -> Dict[str, Optional[int]]:
    """Объём памяти хоста в байтах, None если ОС не отдаёт sysconf"""
    try:
        page_size = os.sysconf("SC_PAGE_SIZE")
        return {
            "totalMemory": page_size * os.sysconf("SC_PHYS_PAGES"),
            "freeMemory": page_size * os.sysconf("SC_AVPHYS_PAGES"),
        }
    except (AttributeError, ValueError, OSError):
        return {"totalMemory": None, "freeMemory": None}


@router.get("", response_model=HealthStatus)
async def health():
    """Проверка работоспособности"""
    return {"status": "ok"}


@router.get("/info", response_model=HealthInfo, response_model_by_alias=True)
async def health_info():
    """Потребление CPU процессом (микросекунды) и память хоста"""
    times = os.times()
    return HealthInfo(
        cpu_usage=CpuUsage(user=int(times.user * 1_000_000), system=int(times.system * 1_000_000)),
        uptime=round(time.monotonic() - STARTED_AT, 3),
        **_memory(),
    )
