from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from dashboard.dependencies import get_reflection_service, resolve_day
from dashboard.schemas import NoteOut
from services.reflection import ReflectionService

router = APIRouter(prefix="/api/reflection", tags=["reflection"])


@router.get("/{owner}", response_model=List[NoteOut])
async def get_notes(
    owner: str,
    day: Optional[date] = Query(None, alias="date"),
    q: str = Query(""),
    service: ReflectionService = Depends(get_reflection_service),
):
    """
    История заметок, новые сначала, с поиском по тексту и дате
    """
    notes = await service.history(owner, resolve_day(day), q)
    return [NoteOut(date=n.date, gratitude=n.gratitude, improve=n.improve) for n in notes]
