from fastapi import APIRouter, Depends, Query
from book_heaven.api.deps import get_current_user, get_progress_service
from book_heaven.models import User
from book_heaven.schemas.progress import (
    HeatmapDayOut,
    PagesReadOut,
    ProgressHistoryOut,
    ProgressList,
    ProgressOut,
    ProgressUpdate,
    ReadingStatsOut,
    ReadingSummary,
)
from book_heaven.services.progress import ProgressService

router = APIRouter()


@router.post("/progress", response_model=ProgressOut)
def record_progress(
    payload: ProgressUpdate,
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.record_progress(
        user.id,
        payload.book_id,
        payload.current_page,
        payload.progress,
        total_pages=payload.total_pages,
        time_spent=payload.time_spent,
        expected_version=payload.expected_version,
    )


@router.get("/progress", response_model=ProgressList)
def list_progress(
    type: str = Query("all", pattern="^(all|in-progress|completed)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    items, total = service.list_progress(user.id, type, page=page, limit=limit)
    summary = ReadingSummary(**service.reading_summary(user.id))
    return ProgressList(items=items, total=total, page=page, limit=limit, summary=summary)


@router.get("/progress/{book_id}", response_model=ProgressOut)
def get_progress(
    book_id: int,
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.get_progress(user.id, book_id)


@router.post("/progress/{book_id}/reset", response_model=ProgressOut)
def reset_progress(
    book_id: int,
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.reset_progress(user.id, book_id)


@router.post("/progress/{book_id}/complete", response_model=ProgressOut)
def complete_book(
    book_id: int,
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.mark_completed(user.id, book_id)


@router.get("/progress/{book_id}/history", response_model=list[ProgressHistoryOut])
def get_history(
    book_id: int,
    period: str = Query("all", pattern="^(all|week|month)$"),
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.get_history(user.id, book_id, period)


@router.get("/progress/{book_id}/heatmap", response_model=list[HeatmapDayOut])
def get_heatmap(
    book_id: int,
    days: int = Query(365, ge=7, le=365),
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.get_heatmap(user.id, book_id, days)


@router.get("/progress/{book_id}/pages-per-day", response_model=list[PagesReadOut])
def get_pages_per_day(
    book_id: int,
    days: int = Query(30, ge=7, le=365),
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.get_pages_per_day(user.id, book_id, days)


@router.get("/progress/{book_id}/pages-per-week", response_model=list[PagesReadOut])
def get_pages_per_week(
    book_id: int,
    weeks: int = Query(12, ge=1, le=52),
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.get_pages_per_week(user.id, book_id, weeks)


@router.get("/progress/{book_id}/stats", response_model=ReadingStatsOut)
def get_stats(
    book_id: int,
    user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
):
    return service.get_stats(user.id, book_id)
