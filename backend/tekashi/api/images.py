"""
Images API Endpoints
Metadata for catalog images hosted locally or on a CDN

Author: Tekashi
Date: 2025-10-31
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from pydantic import BaseModel

from tekashi.core.auth import require_admin
from tekashi.core.config import settings
from tekashi.core.database import transaction
from tekashi.domain.image import ImageCreate, ImageKind, ImageUpdate, optimized_urls
from tekashi.repositories.image_repository import ImageRepository

router = APIRouter()


class SortOrderUpdate(BaseModel):
    sort_order: int


def _page(images, total: int, limit: int, offset: int) -> dict:
    return {
        "status": "success",
        "total": total,
        "limit": limit,
        "offset": offset,
        "count": len(images),
        "data": [image.to_dict(settings.PUBLIC_BASE_URL) for image in images]
    }


def _image_or_404(image):
    if not image:
        raise HTTPException(status_code=404, detail="Image not found")
    return {"status": "success", "data": image.to_dict(settings.PUBLIC_BASE_URL)}


@router.get("/")
async def get_images(
    product_type_id: Optional[int] = Query(None),
    product_id: Optional[int] = Query(None),
    kind: Optional[ImageKind] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    try:
        images, total = ImageRepository().find_all(
            product_type_id=product_type_id,
            product_id=product_id,
            kind=kind.value if kind else None,
            limit=limit,
            offset=offset
        )
        return _page(images, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching images: {str(e)}")


@router.get("/product-type/{product_type_id}")
async def get_product_type_images(
    product_type_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    try:
        images, total = ImageRepository().find_all(product_type_id=product_type_id, limit=limit, offset=offset)
        return _page(images, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching images: {str(e)}")


@router.get("/product/{product_id}")
async def get_product_images(
    product_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    try:
        images, total = ImageRepository().find_all(product_id=product_id, limit=limit, offset=offset)
        return _page(images, total, limit, offset)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching images: {str(e)}")


@router.get("/{image_id}")
async def get_image(image_id: int):
    try:
        return _image_or_404(ImageRepository().find_by_id(image_id))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching image: {str(e)}")


@router.get("/{image_id}/urls")
async def get_image_urls(image_id: int):
    """Original, optimized and thumbnail URLs"""
    try:
        image = ImageRepository().find_by_id(image_id)
        if not image:
            raise HTTPException(status_code=404, detail="Image not found")
        return {"status": "success", "data": image.urls(settings.PUBLIC_BASE_URL)}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error fetching image: {str(e)}")


@router.post("/", status_code=201)
async def register_image(data: ImageCreate, admin=Depends(require_admin)):
    try:
        image = ImageRepository().create(data)
        return {"status": "success", "data": image.to_dict(settings.PUBLIC_BASE_URL)}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error registering image: {str(e)}")


@router.put("/{image_id}")
async def update_image(image_id: int, data: ImageUpdate, admin=Depends(require_admin)):
    try:
        fields = data.model_dump(exclude_unset=True, mode="json")
        if 'metadata' in fields:
            fields['image_metadata'] = fields.pop('metadata')
        return _image_or_404(ImageRepository().update(image_id, fields))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating image: {str(e)}")


@router.delete("/{image_id}")
async def delete_image(image_id: int, admin=Depends(require_admin)):
    """Soft delete"""
    try:
        if not ImageRepository().deactivate(image_id):
            raise HTTPException(status_code=404, detail="Image not found")
        return {"status": "success", "message": f"Image {image_id} deleted"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting image: {str(e)}")


@router.post("/{image_id}/main")
async def set_main_image(image_id: int, admin=Depends(require_admin)):
    """Make this the main image; other main images of the same product become gallery images"""
    try:
        repo = ImageRepository()
        with transaction() as conn:
            image = repo.find_by_id(image_id, conn=conn)
            if not image:
                raise HTTPException(status_code=404, detail="Image not found")
            repo.demote_main_images(image, conn)
            image = repo.update(image_id, {'kind': ImageKind.MAIN.value}, conn=conn)
        return _image_or_404(image)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating image: {str(e)}")


@router.patch("/{image_id}/sort-order")
async def set_image_sort_order(image_id: int, body: SortOrderUpdate, admin=Depends(require_admin)):
    try:
        return _image_or_404(ImageRepository().update(image_id, {'sort_order': body.sort_order}))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating image: {str(e)}")


@router.post("/{image_id}/optimize")
async def generate_optimized_urls(image_id: int, admin=Depends(require_admin)):
    """Derive and store the optimized and thumbnail URLs for the image's provider"""
    try:
        repo = ImageRepository()
        image = repo.find_by_id(image_id)
        if not image:
            raise HTTPException(status_code=404, detail="Image not found")

        optimized, thumbnail = optimized_urls(image.full_url(settings.PUBLIC_BASE_URL), image.provider)
        return _image_or_404(repo.update(image_id, {
            'optimized_url': optimized,
            'thumbnail_url': thumbnail,
        }))

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error optimizing image: {str(e)}")
