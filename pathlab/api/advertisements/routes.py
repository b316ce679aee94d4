from typing import List

from fastapi import APIRouter, Depends, status

from pathlab.domain.advertisements.service import AdvertisementService
from pathlab.api.deps import Principal, get_db, require_admin
from pathlab.api.advertisements.schemas import (
    AdvertisementCreate, AdvertisementUpdate, AdvertisementResponse,
)
from pathlab.api.reviews.schemas import DeletedResponse

router = APIRouter(tags=["Advertisements"])


@router.get("/advertisements", response_model=List[AdvertisementResponse])
def list_active_advertisements(db=Depends(get_db)):
    """Active banners in display order"""
    return AdvertisementService(db).list_active()


@router.get("/admin/advertisements", response_model=List[AdvertisementResponse])
def list_all_advertisements(
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return AdvertisementService(db).list_all()


@router.post("/admin/advertisements", response_model=AdvertisementResponse, status_code=status.HTTP_201_CREATED)
def create_advertisement(
    body: AdvertisementCreate,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return AdvertisementService(db).create_advertisement(body.model_dump())


@router.patch("/admin/advertisements/{ad_id}", response_model=AdvertisementResponse)
def update_advertisement(
    ad_id: str,
    body: AdvertisementUpdate,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return AdvertisementService(db).update_advertisement(ad_id, body.model_dump(exclude_unset=True))


@router.delete("/admin/advertisements/{ad_id}", response_model=DeletedResponse)
def delete_advertisement(
    ad_id: str,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    AdvertisementService(db).delete_advertisement(ad_id)
    return DeletedResponse(message="Advertisement deleted successfully")
