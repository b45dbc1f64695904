"""
Reviews API Endpoints
Product ratings, helpfulness votes and moderation

Author: Tekashi
Date: 2025-10-31
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pydantic import BaseModel, Field

from tekashi.core.auth import get_current_account, require_admin, ensure_owner_or_admin
from tekashi.core.exceptions import TekashiError
from tekashi.domain.review import ReviewCreate, ReviewUpdate
from tekashi.repositories.review_repository import ReviewRepository
from tekashi.services.review_service import ReviewService

router = APIRouter()


class VoteRequest(BaseModel):
    helpful: bool


class ReportRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ReplyRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)


class VerifyRequest(BaseModel):
    verified: bool = True


def _page(reviews, total: int, limit: int, offset: int) -> dict:
    return {
        "status": "success",
        "total": total,
        "limit": limit,
        "offset": offset,
        "count": len(reviews),
        "data": [review.to_dict() for review in reviews]
    }


@router.get("/")
async def get_reviews(
    product_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None),
    rating: Optional[int] = Query(None, ge=1, le=5),
    reported: Optional[bool] = Query(None),
    sort: str = Query("created_at", description="created_at, rating, helpful"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    try:
        reviews, total = ReviewRepository().find_all(
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            reported=reported,
            sort=sort,
            direction=direction,
            limit=limit,
            offset=offset
        )
        return _page(reviews, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching reviews: {str(e)}")


@router.get("/product/{product_id}")
async def get_product_reviews(
    product_id: int,
    sort: str = Query("created_at"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0)
):
    """Reviews of a product together with their aggregate stats"""
    try:
        repo = ReviewRepository()
        reviews, total = repo.find_all(
            product_id=product_id, sort=sort, direction=direction, limit=limit, offset=offset
        )
        stats = repo.get_product_stats(product_id)
        return {
            **_page(reviews, total, limit, offset),
            "stats": {**stats.model_dump(), "helpfulness": stats.helpfulness}
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching reviews: {str(e)}")


@router.get("/user/{user_id}")
async def get_user_reviews(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account=Depends(get_current_account)
):
    try:
        ensure_owner_or_admin(account, user_id, "You can only view your own reviews")
        reviews, total = ReviewRepository().find_all(user_id=user_id, limit=limit, offset=offset)
        return _page(reviews, total, limit, offset)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching reviews: {str(e)}")


@router.get("/{review_id}")
async def get_review(review_id: int):
    try:
        return {"status": "success", "data": ReviewService().get_review(review_id).to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching review: {str(e)}")


@router.post("/", status_code=201)
async def create_review(data: ReviewCreate, account=Depends(get_current_account)):
    try:
        review = ReviewService().create_review(account, data)
        return {"status": "success", "data": review.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating review: {str(e)}")


@router.put("/{review_id}")
async def update_review(review_id: int, data: ReviewUpdate, account=Depends(get_current_account)):
    try:
        review = ReviewService().update_review(review_id, account, data)
        return {"status": "success", "data": review.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating review: {str(e)}")


@router.delete("/{review_id}")
async def delete_review(review_id: int, account=Depends(get_current_account)):
    try:
        ReviewService().delete_review(review_id, account)
        return {"status": "success", "message": f"Review {review_id} deleted"}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting review: {str(e)}")


@router.post("/{review_id}/vote")
async def vote_review(review_id: int, body: VoteRequest, account=Depends(get_current_account)):
    try:
        review = ReviewService().vote(review_id, body.helpful)
        return {"status": "success", "data": review.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error voting review: {str(e)}")


@router.post("/{review_id}/report")
async def report_review(review_id: int, body: ReportRequest, account=Depends(get_current_account)):
    try:
        review = ReviewService().report(review_id, body.reason)
        return {"status": "success", "data": review.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error reporting review: {str(e)}")


@router.post("/{review_id}/reply")
async def reply_review(review_id: int, body: ReplyRequest, admin=Depends(require_admin)):
    try:
        review = ReviewService().reply(review_id, admin, body.text)
        return {"status": "success", "data": review.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error replying to review: {str(e)}")


@router.patch("/{review_id}/verify")
async def verify_review(review_id: int, body: VerifyRequest, admin=Depends(require_admin)):
    try:
        review = ReviewService().verify(review_id, body.verified)
        return {"status": "success", "data": review.to_dict()}

    except (HTTPException, TekashiError):
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error verifying review: {str(e)}")
