"""Reference data: platform fee schedules, shipping bands and customs duties."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import CustomsDuty, Platform, ShippingRate, ShippingZone
from ..schemas import (
    CustomsDutyCreate,
    CustomsDutyResponse,
    PlatformResponse,
    PlatformUpdate,
    ShippingRateCreate,
    ShippingRateResponse,
)

router = APIRouter(prefix="/api", tags=["reference"])


# --- Platforms ---

@router.get("/platforms", response_model=list[PlatformResponse])
def list_platforms(kind: str | None = None, db: Session = Depends(get_db)):
    q = db.query(Platform)
    if kind:
        q = q.filter(Platform.kind == kind)
    return q.order_by(Platform.kind, Platform.name).all()


@router.put("/platforms/{name}", response_model=PlatformResponse)
def update_platform(name: str, body: PlatformUpdate, db: Session = Depends(get_db)):
    platform = db.query(Platform).filter(Platform.name == name).first()
    if not platform:
        raise HTTPException(404, f"Platform {name} not found")
    for key, val in body.model_dump(exclude_unset=True).items():
        setattr(platform, key, val.upper() if key == "currency" and val else val)
    db.commit()
    db.refresh(platform)
    return platform


# --- Shipping ---

def _shipping_response(rate: ShippingRate) -> ShippingRateResponse:
    return ShippingRateResponse(
        id=rate.id,
        zone=rate.zone.name,
        min_weight_kg=rate.min_weight_kg,
        max_weight_kg=rate.max_weight_kg,
        cost_jpy=rate.cost_jpy,
    )


@router.get("/shipping-rates", response_model=list[ShippingRateResponse])
def list_shipping_rates(zone: str | None = None, db: Session = Depends(get_db)):
    q = db.query(ShippingRate).join(ShippingZone)
    if zone:
        q = q.filter(ShippingZone.name == zone)
    rates = q.order_by(ShippingZone.name, ShippingRate.min_weight_kg).all()
    return [_shipping_response(r) for r in rates]


@router.post("/shipping-rates", response_model=ShippingRateResponse, status_code=201)
def create_shipping_rate(body: ShippingRateCreate, db: Session = Depends(get_db)):
    if body.max_weight_kg is not None and body.max_weight_kg <= body.min_weight_kg:
        raise HTTPException(422, "max_weight_kg must be greater than min_weight_kg")

    zone = db.query(ShippingZone).filter(ShippingZone.name == body.zone).first()
    if zone is None:
        zone = ShippingZone(name=body.zone)
        db.add(zone)
        db.flush()

    rate = ShippingRate(
        shipping_zone_id=zone.id,
        min_weight_kg=body.min_weight_kg,
        max_weight_kg=body.max_weight_kg,
        cost_jpy=body.cost_jpy,
    )
    db.add(rate)
    db.commit()
    db.refresh(rate)
    return _shipping_response(rate)


# --- Customs ---

@router.get("/customs-duties", response_model=list[CustomsDutyResponse])
def list_customs_duties(country_code: str | None = None, db: Session = Depends(get_db)):
    q = db.query(CustomsDuty)
    if country_code:
        q = q.filter(CustomsDuty.country_code == country_code.upper())
    return q.order_by(CustomsDuty.country_code, CustomsDuty.hs_code_prefix).all()


@router.post("/customs-duties", response_model=CustomsDutyResponse, status_code=201)
def create_customs_duty(body: CustomsDutyCreate, db: Session = Depends(get_db)):
    if (
        body.min_value_usd is not None
        and body.max_value_usd is not None
        and body.max_value_usd < body.min_value_usd
    ):
        raise HTTPException(422, "max_value_usd must not be below min_value_usd")

    duty = CustomsDuty(**body.model_dump())
    duty.country_code = duty.country_code.upper()
    db.add(duty)
    db.commit()
    db.refresh(duty)
    return duty
