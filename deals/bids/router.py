import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Query, Path, Body, Response

from deals.auth.dependencies import CurrentActorDep
from deals.auth.exceptions import AuthorizationException, to_http_exception
from deals.bids.dependencies import BidServiceDep
from deals.bids.exceptions import (
    BidNotFoundException,
    BidValidationException,
    InvalidBidTransitionException,
)
from deals.bids.models import BidCreate, BidDecision, BidRead, BidStatus, PaginatedBidRead
from deals.config import settings
from deals.products.exceptions import LotNotFoundException, MalformedLotException

logger = logging.getLogger(__name__)

router = APIRouter()

def _reason_detail(e) -> dict:
    """Corps d'erreur : raison stable + message lisible."""
    return {"reason": e.reason, "message": e.message}

def _set_content_range(response: Response, offset: int, page: PaginatedBidRead) -> None:
    end_range = offset + len(page.items) - 1 if page.items else offset
    response.headers["Content-Range"] = f"bids {offset}-{end_range}/{page.total}"

@router.post("/", response_model=BidRead, status_code=status.HTTP_201_CREATED)
async def submit_bid(
    bid_in: BidCreate,
    bid_service: BidServiceDep,
    current_actor: CurrentActorDep,
):
    """Soumet une enchère (quantité, prix unitaire) sur un lot du catalogue."""
    logger.info(f"API submit_bid: lot {bid_in.product_id} par user {current_actor.user_id}")
    try:
        return await bid_service.submit_bid(bid_in, current_actor)
    except BidValidationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_reason_detail(e))
    except LotNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except MalformedLotException as e:
        logger.error(f"Erreur API submit_bid: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Lot invalide.")
    except AuthorizationException as e:
        raise to_http_exception(e)

@router.get("/", response_model=PaginatedBidRead)
async def list_my_bids(
    bid_service: BidServiceDep,
    current_actor: CurrentActorDep,
    response: Response,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Liste les enchères de l'utilisateur connecté, les plus récentes d'abord."""
    page = await bid_service.list_my_bids(current_actor, limit=limit, offset=offset)
    _set_content_range(response, offset, page)
    return page

@router.get("/all", response_model=PaginatedBidRead)
async def list_all_bids(
    bid_service: BidServiceDep,
    current_actor: CurrentActorDep,
    response: Response,
    status_filter: Optional[BidStatus] = Query(None, alias="status"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Liste toutes les enchères (admin), filtrables par statut."""
    try:
        page = await bid_service.list_all_bids(current_actor, limit=limit, offset=offset, status=status_filter)
    except AuthorizationException as e:
        raise to_http_exception(e)
    _set_content_range(response, offset, page)
    return page

@router.get("/{bid_id}", response_model=BidRead)
async def read_bid(
    bid_service: BidServiceDep,
    current_actor: CurrentActorDep,
    bid_id: int = Path(..., ge=1),
):
    try:
        return await bid_service.get_bid(bid_id, current_actor)
    except BidNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except AuthorizationException as e:
        raise to_http_exception(e)

@router.patch("/{bid_id}/status", response_model=BidRead)
async def decide_bid(
    bid_service: BidServiceDep,
    current_actor: CurrentActorDep,
    bid_id: int = Path(..., ge=1),
    decision: BidDecision = Body(...),
):
    """Approuve ou rejette une enchère en attente (admin)."""
    logger.info(f"API decide_bid: ID={bid_id} -> '{decision.status.value}' par user {current_actor.user_id}")
    try:
        return await bid_service.decide_bid(bid_id, decision.status, current_actor)
    except BidNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InvalidBidTransitionException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_reason_detail(e))
    except AuthorizationException as e:
        raise to_http_exception(e)

@router.delete("/{bid_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bid(
    bid_service: BidServiceDep,
    current_actor: CurrentActorDep,
    bid_id: int = Path(..., ge=1),
):
    """Annule une enchère en attente (propriétaire) ou supprime une enchère (admin)."""
    logger.info(f"API delete_bid: ID={bid_id} par user {current_actor.user_id}")
    try:
        await bid_service.withdraw_bid(bid_id, current_actor)
    except BidNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except InvalidBidTransitionException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_reason_detail(e))
    except AuthorizationException as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

bid_router = router
