# gpu_pricing/api/providers.py

import logging
from collections import defaultdict
from typing import Dict, List

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import select

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
from gpu_pricing.models.providers import (
    CatalogTotals,
    InstanceTypeSummary,
    ProviderSummary,
    ProvidersResponse,
    RegionSummary,
)

logger = logging.getLogger(__name__)

INSTANCES_PER_REGION = 2

router = APIRouter(prefix="/api/providers", tags=["providers"])


def _instance_row_to_summary(row) -> InstanceTypeSummary:
    price = float(row["price"]) if row["price"] is not None else None
    return InstanceTypeSummary(
        instance_name=row["instance_name"],
        gpu_model=row["gpu_model"],
        gpu_count=row["gpu_count"],
        vcpu=row["vcpu_count"],
        ram=row["ram_gb"],
        price=price,
        price_per_gpu=price_per_gpu(price, row["gpu_count"]),
    )


@router.get("", response_model=ProvidersResponse)
def list_providers():
    """
    Every provider with its regions and a small sample of instance types
    (two per region) priced at their latest on-demand rate.
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            provider_rows = conn.execute(
                select(providers.c.id, providers.c.code, providers.c.name)
                .order_by(providers.c.id)
            ).mappings().all()

            region_rows = conn.execute(
                select(
                    regions.c.id,
                    regions.c.provider_id,
                    regions.c.code,
                    regions.c.name,
                    regions.c.country_code,
                )
                .order_by(regions.c.id)
            ).mappings().all()

            # Latest on-demand price, correlated to the outer instance row
            latest_price = (
                select(price_history.c.price_amount)
                .where(
                    price_history.c.instance_type_id == instance_types.c.id,
                    price_history.c.purchase_option == "on_demand",
                )
                .order_by(price_history.c.effective_date.desc(), price_history.c.id.desc())
                .limit(1)
                .scalar_subquery()
            )

            instance_rows = conn.execute(
                select(
                    instance_types.c.region_id,
                    instance_types.c.instance_name,
                    gpu_models.c.model.label("gpu_model"),
                    instance_types.c.gpu_count,
                    instance_types.c.vcpu_count,
                    instance_types.c.ram_gb,
                    latest_price.label("price"),
                )
                .select_from(
                    instance_types
                    .join(instance_families, instance_types.c.family_id == instance_families.c.id)
                    .join(gpu_models, instance_families.c.gpu_model_id == gpu_models.c.id)
                )
                .order_by(instance_types.c.region_id, instance_types.c.id)
            ).mappings().all()
    except Exception as e:
        logger.exception("Providers API error")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Failed to fetch providers data",
                "error": str(e),
            },
        )

    instances_by_region: Dict[int, List[InstanceTypeSummary]] = defaultdict(list)
    for row in instance_rows:
        bucket = instances_by_region[row["region_id"]]
        if len(bucket) < INSTANCES_PER_REGION:
            bucket.append(_instance_row_to_summary(row))

    regions_by_provider: Dict[int, List[RegionSummary]] = defaultdict(list)
    for row in region_rows:
        regions_by_provider[row["provider_id"]].append(
            RegionSummary(
                code=row["code"],
                name=row["name"],
                country_code=row["country_code"],
                instance_types=instances_by_region.get(row["id"], []),
            )
        )

    data: List[ProviderSummary] = []
    for row in provider_rows:
        provider_regions = regions_by_provider.get(row["id"], [])
        data.append(
            ProviderSummary(
                code=row["code"],
                name=row["name"],
                region_count=len(provider_regions),
                regions=provider_regions,
            )
        )

    summary = CatalogTotals(
        total_providers=len(data),
        total_regions=sum(p.region_count for p in data),
        total_instances=sum(
            len(r.instance_types) for p in data for r in p.regions
        ),
    )

    return ProvidersResponse(data=data, summary=summary)
