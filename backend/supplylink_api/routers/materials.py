"""Supplier material endpoints plus the manufacturer purchase entry point."""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import (
    get_current_claims,
    get_db_session,
    get_image_storage,
    require_manufacturer,
    require_supplier,
)
from ..models import Material
from ..schemas import (
    MaterialPurchaseResult,
    MaterialRead,
    MAX_QUANTITY,
    Message,
    PurchasedMaterialRead,
    PurchaseRead,
    PurchaseRequest,
    TokenClaims,
)
from ..services import purchases, records
from ..services.accounts import get_account
from ..services.storage import ImageStorage

router = APIRouter(prefix="/materials", tags=["materials"])


@asynccontextmanager
async def _image_reference(
    storage: ImageStorage, image: UploadFile | None, image_url: str | None
) -> AsyncIterator[str | None]:
    """Yield the image reference; a stored upload is removed if the write fails."""
    if image is None or not image.filename:
        yield image_url or None
        return

    reference = await storage.save(image)
    try:
        yield reference
    except Exception:
        await storage.discard(reference)
        raise


@router.post("", response_model=MaterialRead, status_code=status.HTTP_201_CREATED)
async def create_material(
    name: str = Form(..., min_length=1),
    quantity: int = Form(..., ge=0, le=MAX_QUANTITY),
    price: float = Form(..., ge=0, allow_inf_nan=False),
    description: str = Form(""),
    location_address: str | None = Form(None),
    location_lat: float | None = Form(None, allow_inf_nan=False),
    location_lng: float | None = Form(None, allow_inf_nan=False),
    image_url: str | None = Form(None),
    image: UploadFile | None = File(None),
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
    storage: ImageStorage = Depends(get_image_storage),
) -> Material:
    """List a raw material; an uploaded image or an image URL is required."""

    owner = await get_account(session, claims.id)
    async with _image_reference(storage, image, image_url) as reference:
        return await records.materials.create(
            session,
            owner,
            name=name,
            quantity=quantity,
            price=price,
            description=description,
            image=reference,
            location_address=location_address,
            location_lat=location_lat,
            location_lng=location_lng,
        )


@router.get("/mine", response_model=list[MaterialRead])
async def list_my_materials(
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Material]:
    """Return only the caller's materials, newest first."""

    return await records.materials.list_own(session, claims.id)


@router.get("/available", response_model=list[MaterialRead])
async def list_available_materials(
    in_stock: bool = False,
    claims: TokenClaims = Depends(get_current_claims),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Material]:
    """Every listed material regardless of owner."""

    criteria = (Material.quantity > 0,) if in_stock else ()
    return await records.materials.list_all(session, *criteria)


@router.put("/{material_id}", response_model=MaterialRead)
async def update_material(
    material_id: int,
    name: str | None = Form(None, min_length=1),
    quantity: int | None = Form(None, ge=0, le=MAX_QUANTITY),
    price: float | None = Form(None, ge=0, allow_inf_nan=False),
    description: str | None = Form(None),
    location_address: str | None = Form(None),
    location_lat: float | None = Form(None, allow_inf_nan=False),
    location_lng: float | None = Form(None, allow_inf_nan=False),
    image_url: str | None = Form(None),
    image: UploadFile | None = File(None),
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
    storage: ImageStorage = Depends(get_image_storage),
) -> Material:
    """Update one of the caller's materials."""

    async with _image_reference(storage, image, image_url) as reference:
        return await records.materials.update(
            session,
            claims.id,
            material_id,
            {
                "name": name,
                "quantity": quantity,
                "price": price,
                "description": description,
                "image": reference,
                "location_address": location_address,
                "location_lat": location_lat,
                "location_lng": location_lng,
            },
        )


@router.delete("/{material_id}", response_model=Message)
async def delete_material(
    material_id: int,
    claims: TokenClaims = Depends(require_supplier),
    session: AsyncSession = Depends(get_db_session),
) -> Message:
    await records.materials.delete(session, claims.id, material_id)
    return Message(message="Material deleted successfully")


@router.post("/{material_id}/purchase", response_model=MaterialPurchaseResult)
async def purchase_material(
    material_id: int,
    payload: PurchaseRequest,
    claims: TokenClaims = Depends(require_manufacturer),
    session: AsyncSession = Depends(get_db_session),
) -> MaterialPurchaseResult:
    """Record a raw-material purchase once the buyer's external transaction is sent."""

    outcome = await purchases.purchase_material(
        session, claims.id, material_id, payload.quantity, payload.external_tx_id
    )
    return MaterialPurchaseResult(
        purchase=PurchaseRead.model_validate(outcome.purchase),
        purchased_material=PurchasedMaterialRead.model_validate(outcome.purchased_material),
        remaining_stock=outcome.remaining_stock,
    )
