"""Default reference data, inserted only where rows are missing."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from .models import Platform, ShippingRate, ShippingZone
from .pricing.fees import DEFAULT_FEE_SCHEDULES, DomesticPlatform

logger = logging.getLogger(__name__)

# (min_kg inclusive, max_kg exclusive or None, cost JPY); EMS-like tiers
DEFAULT_SHIPPING_BANDS: dict[str, list[tuple[float, float | None, float]]] = {
    "USA": [
        (0.0, 0.5, 2500),
        (0.5, 1.0, 3500),
        (1.0, 2.0, 5500),
        (2.0, 5.0, 9800),
        (5.0, None, 18000),
    ],
    "Europe": [
        (0.0, 0.5, 2300),
        (0.5, 1.0, 3200),
        (1.0, 2.0, 5000),
        (2.0, 5.0, 9000),
        (5.0, None, 16500),
    ],
}

_DOMESTIC_NAMES = {p.value for p in DomesticPlatform}


def seed_reference_data(db: Session) -> int:
    """Insert default platforms and shipping tables. Returns the number of rows added."""
    added = 0

    for name, schedule in DEFAULT_FEE_SCHEDULES.items():
        if db.query(Platform).filter(Platform.name == name).first():
            continue
        db.add(Platform(
            name=name,
            kind="domestic" if name in _DOMESTIC_NAMES else "overseas",
            currency=schedule.currency,
            base_fee_percentage=schedule.base_fee_percentage,
            fixed_fee_local_currency=schedule.fixed_fee_local_currency,
        ))
        added += 1

    for zone_name, bands in DEFAULT_SHIPPING_BANDS.items():
        if db.query(ShippingZone).filter(ShippingZone.name == zone_name).first():
            continue
        zone = ShippingZone(name=zone_name)
        zone.rates = [
            ShippingRate(min_weight_kg=lo, max_weight_kg=hi, cost_jpy=cost)
            for lo, hi, cost in bands
        ]
        db.add(zone)
        added += 1 + len(bands)

    db.commit()
    if added:
        logger.info("Seeded %d reference rows", added)
    return added
