"""Machine review endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session, selectinload

from vending_info.api.deps import AuthContext, require_admin, require_auth
from vending_info.core.config import settings
from vending_info.core.limiter import limiter
from vending_info.core.schemas.auth import MessageResponse
from vending_info.core.schemas.review import Review, ReviewCreate, ReviewUpdate
from vending_info.db.models.machine import VendingMachine
from vending_info.db.models.review import Review as ReviewModel
from vending_info.db.session import get_db

router = APIRouter()


def _get_review_or_404(db: Session, review_id: int) -> ReviewModel:
    review = db.get(ReviewModel, review_id)
    if not review:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Review with ID {review_id} not found",
        )
    return review


@router.get("", response_model=List[Review])
async def list_reviews(
    machine_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
) -> List[Review]:
    """Approved reviews of a machine, newest first"""
    if machine_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="machine_id is required",
        )

    reviews = (
        db.query(ReviewModel)
        .options(selectinload(ReviewModel.user))
        .filter(ReviewModel.machine_id == machine_id, ReviewModel.is_approved.is_(True))
        .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        .all()
    )
    return [Review.model_validate(review) for review in reviews]


@router.post("", response_model=Review, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_write_endpoints)
async def create_review(
    request: Request,
    payload: ReviewCreate,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
) -> Review:
    """Review a machine as the authenticated user"""
    machine = db.get(VendingMachine, payload.machine_id)
    if not machine or not machine.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Machine with ID {payload.machine_id} not found",
        )

    review = ReviewModel(
        machine_id=machine.id,
        user_id=auth.user.id,
        rating=payload.rating,
        comment=payload.comment.strip(),
        is_approved=settings.AUTO_APPROVE_REVIEWS,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return Review.model_validate(review)


@router.patch("/{review_id}", response_model=Review)
@limiter.limit(settings.rate_limit_write_endpoints)
async def moderate_review(
    request: Request,
    review_id: int,
    payload: ReviewUpdate,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Review:
    """Approve or hide a review (admin only)"""
    review = _get_review_or_404(db, review_id)
    review.is_approved = payload.is_approved
    db.commit()
    db.refresh(review)
    return Review.model_validate(review)


@router.delete("/{review_id}", response_model=MessageResponse)
@limiter.limit(settings.rate_limit_write_endpoints)
async def delete_review(
    request: Request,
    review_id: int,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete a review. Allowed for admins and the review's author."""
    review = _get_review_or_404(db, review_id)
    if not auth.is_admin and review.user_id != auth.user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    db.delete(review)
    db.commit()
    return MessageResponse(message="Review deleted successfully")
