from fastapi import APIRouter, Depends
from book_heaven.api.deps import get_current_user, get_offer_service
from book_heaven.models import User
from book_heaven.models.enums import OfferStatus
from book_heaven.schemas.offer import OfferOut, OfferRespond
from book_heaven.services.offers import OfferService

router = APIRouter()


@router.get("/offers/sent", response_model=list[OfferOut])
def list_sent_offers(
    status: OfferStatus | None = None,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.list_buyer_offers(user.id, status)


@router.get("/offers/received", response_model=list[OfferOut])
def list_received_offers(
    status: OfferStatus | None = None,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.list_seller_offers(user.id, status)


@router.get("/offers/{offer_id}", response_model=OfferOut)
def get_offer(offer_id: int, user: User = Depends(get_current_user), service: OfferService = Depends(get_offer_service)):
    return service.get_offer(offer_id, user.id)


@router.post("/offers/{offer_id}/respond", response_model=OfferOut)
def respond_to_offer(
    offer_id: int,
    payload: OfferRespond,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.respond_to_offer(
        offer_id,
        user.id,
        payload.action,
        counter_price=payload.counter_price,
        response_message=payload.response_message,
    )


@router.post("/offers/{offer_id}/accept-counter", response_model=OfferOut)
def accept_counter_offer(
    offer_id: int,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.accept_counter(offer_id, user.id)


@router.delete("/offers/{offer_id}", response_model=OfferOut)
def withdraw_offer(
    offer_id: int,
    user: User = Depends(get_current_user),
    service: OfferService = Depends(get_offer_service),
):
    return service.withdraw_offer(offer_id, user.id)
