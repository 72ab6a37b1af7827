# gpu_pricing/api/health.py

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select

from gpu_pricing.calc import price_per_gpu
from gpu_pricing.db.engine import get_engine
from gpu_pricing.db.schema import (
    gpu_models,
    instance_families,
    instance_types,
    price_history,
    providers,
    regions,
)
from gpu_pricing.models.health import (
    DbHealthData,
    DbHealthResponse,
    DbStats,
    LatestPriceSample,
)

logger = logging.getLogger(__name__)

LATEST_PRICES_LIMIT = 5

router = APIRouter(prefix="/api", tags=["health"])


def _count(table):
    return select(func.count()).select_from(table).scalar_subquery()


@router.get("/test", response_model=DbHealthResponse)
def db_health():
    """
    Check the database connection: row counts for the main tables plus
    the five most recently recorded prices.
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            # One statement so all five counts come from the same snapshot
            stats_stmt = select(
                _count(providers).label("providers"),
                _count(regions).label("regions"),
                _count(gpu_models).label("gpu_models"),
                _count(instance_types).label("instance_types"),
                _count(price_history).label("prices"),
            )
            stats_row = conn.execute(stats_stmt).mappings().one()

            latest_stmt = (
                select(
                    instance_types.c.instance_name,
                    providers.c.name.label("provider"),
                    regions.c.name.label("region"),
                    gpu_models.c.model.label("gpu_model"),
                    instance_types.c.gpu_count,
                    price_history.c.price_amount,
                    price_history.c.currency,
                )
                .select_from(
                    price_history
                    .join(instance_types, price_history.c.instance_type_id == instance_types.c.id)
                    .join(providers, instance_types.c.provider_id == providers.c.id)
                    .join(regions, instance_types.c.region_id == regions.c.id)
                    .join(instance_families, instance_types.c.family_id == instance_families.c.id)
                    .join(gpu_models, instance_families.c.gpu_model_id == gpu_models.c.id)
                )
                .order_by(price_history.c.created_at.desc(), price_history.c.id.desc())
                .limit(LATEST_PRICES_LIMIT)
            )
            rows = conn.execute(latest_stmt).mappings().all()
    except Exception as e:
        logger.exception("Database health check failed")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Error while testing the API",
                "error": str(e),
            },
        )

    latest_prices: List[LatestPriceSample] = []
    for row in rows:
        latest_prices.append(
            LatestPriceSample(
                instance_name=row["instance_name"],
                provider=row["provider"],
                region=row["region"],
                gpu_model=row["gpu_model"],
                gpu_count=row["gpu_count"],
                price_per_hour=float(row["price_amount"]),
                price_per_gpu=price_per_gpu(row["price_amount"], row["gpu_count"]),
                currency=row["currency"],
            )
        )

    return DbHealthResponse(
        message="API and database connection are working",
        data=DbHealthData(
            stats=DbStats(**stats_row),
            latest_prices=latest_prices,
        ),
        timestamp=datetime.now(timezone.utc),
    )
