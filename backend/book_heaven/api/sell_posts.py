from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from book_heaven.api.deps import get_current_user, get_offer_service
from book_heaven.db.session import get_db
from book_heaven.models import User
from book_heaven.models.enums import SellPostStatus
from book_heaven.schemas.offer import OfferCreate, OfferOut, OfferStats
from book_heaven.schemas.sell_post import SellPostCreate, SellPostOut, SellPostPage, SellPostUpdate
from book_heaven.services import sell_posts
from book_heaven.services.offers import OfferService

router = APIRouter()


@router.post("/sell-posts", response_model=SellPostOut, status_code=201)
def create_sell_post(
    payload: SellPostCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return sell_posts.create_sell_post(db, user.id, payload.model_dump())


@router.get("/sell-posts", response_model=SellPostPage)
def list_sell_posts(
    status: SellPostStatus | None = None,
    seller_id: int | None = None,
    city: str | None = None,
    search: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    negotiable: bool | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
):
    filters = sell_posts.SellPostFilters(
        status=status,
        seller_id=seller_id,
        city=city,
        search=search,
        min_price=min_price,
        max_price=max_price,
        negotiable=negotiable,
    )
    items, total = sell_posts.list_sell_posts(db, filters, page=page, limit=limit)
    return SellPostPage(items=items, total=total, page=page, limit=limit)


@router.get("/sell-posts/{post_id}", response_model=SellPostOut)
def get_sell_post(post_id: int, db: Session = Depends(get_db)):
    return sell_posts.get_sell_post(db, post_id)


@router.patch("/sell-posts/{post_id}", response_model=SellPostOut)
def update_sell_post(
    post_id: int,
    payload: SellPostUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return sell_posts.update_sell_post(db, post_id, user.id, user.role, payload.model_dump(exclude_unset=True))


@router.delete("/sell-posts/{post_id}", response_model=SellPostOut)
def hide_sell_post(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return sell_posts.hide_sell_post(db, post_id, user.id, user.role)


@router.post("/sell-posts/{post_id}/mark-sold", response_model=SellPostOut)
def mark_sell_post_sold(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return sell_posts.mark_sold(db, post_id, user.id, user.role)


@router.get("/sell-posts/{post_id}/offers", response_model=list[OfferOut])
def list_post_offers(
    post_id: int,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.list_offers_for_post(post_id, user.id, user.role)


@router.post("/sell-posts/{post_id}/offers", response_model=OfferOut, status_code=201)
def make_offer(
    post_id: int,
    payload: OfferCreate,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.create_offer(user.id, post_id, payload.offered_price, payload.message)


@router.get("/sell-posts/{post_id}/offers/stats", response_model=OfferStats)
def post_offer_stats(
    post_id: int,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.offer_stats(post_id, user.id, user.role)
