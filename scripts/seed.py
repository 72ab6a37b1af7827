# scripts/seed.py

import json
import logging
import random
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from gpu_pricing.db.engine import get_engine
from gpu_pricing.db.schema import (
    gpu_models,
    instance_families,
    instance_types,
    price_history,
    providers,
    regions,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

SPECS_PATH = "data/instance-specs.json"


# ---- Reference data ----

GPU_MODELS = [
    {
        "vendor": "NVIDIA", "model": "H100", "architecture": "Hopper",
        "vram_gb": 80, "memory_type": "HBM3", "memory_bandwidth_gbps": 3350,
        "fp16_tflops": 1979.0, "bf16_tflops": 1979.0, "int8_tops": 3958.0,
        "nvlink_support": True, "mig_support": True,
    },
    {
        "vendor": "NVIDIA", "model": "A100", "architecture": "Ampere",
        "vram_gb": 40, "memory_type": "HBM2e", "memory_bandwidth_gbps": 1555,
        "fp16_tflops": 312.0, "bf16_tflops": 312.0, "int8_tops": 624.0,
        "nvlink_support": True, "mig_support": True,
    },
    {
        "vendor": "NVIDIA", "model": "A10G", "architecture": "Ampere",
        "vram_gb": 24, "memory_type": "GDDR6", "memory_bandwidth_gbps": 600,
        "fp16_tflops": 125.0, "bf16_tflops": 125.0, "int8_tops": 250.0,
        "nvlink_support": False, "mig_support": False,
    },
    {
        "vendor": "NVIDIA", "model": "V100", "architecture": "Volta",
        "vram_gb": 32, "memory_type": "HBM2", "memory_bandwidth_gbps": 900,
        "fp16_tflops": 125.0, "bf16_tflops": None, "int8_tops": None,
        "nvlink_support": True, "mig_support": False,
    },
    {
        "vendor": "NVIDIA", "model": "L4", "architecture": "Ada Lovelace",
        "vram_gb": 24, "memory_type": "GDDR6", "memory_bandwidth_gbps": 300,
        "fp16_tflops": 120.0, "bf16_tflops": 60.0, "int8_tops": 485.0,
        "nvlink_support": False, "mig_support": False,
    },
]

PROVIDERS = [
    {
        "code": "aws",
        "name": "Amazon Web Services",
        "logo_url": "/logos/aws.svg",
        "api_endpoint": "https://pricing.us-east-1.amazonaws.com",
    },
    {
        "code": "azure",
        "name": "Microsoft Azure",
        "logo_url": "/logos/azure.svg",
        "api_endpoint": "https://prices.azure.com/api/retail/prices",
    },
    {
        "code": "gcp",
        "name": "Google Cloud Platform",
        "logo_url": "/logos/gcp.svg",
        "api_endpoint": "https://cloudbilling.googleapis.com/v1",
    },
]

REGIONS = [
    ("aws", "ap-northeast-2", "Asia Pacific (Seoul)", "KR", "asia"),
    ("aws", "ap-northeast-1", "Asia Pacific (Tokyo)", "JP", "asia"),
    ("aws", "us-west-2", "US West (Oregon)", "US", "north-america"),
    ("azure", "koreacentral", "Korea Central", "KR", "asia"),
    ("azure", "japaneast", "Japan East", "JP", "asia"),
    ("azure", "westus2", "West US 2", "US", "north-america"),
    ("gcp", "asia-northeast3", "Seoul", "KR", "asia"),
    ("gcp", "asia-northeast1", "Tokyo", "JP", "asia"),
    ("gcp", "us-west1", "Oregon", "US", "north-america"),
]

# hourly on-demand USD per GPU
BASE_PRICE_PER_GPU = {
    "H100": 4.5,
    "A100": 3.2,
    "A10G": 1.1,
    "V100": 2.4,
    "L4": 0.8,
}
DEFAULT_BASE_PRICE = 1.0

LAUNCH_DATE = date(2024, 1, 1)


# ---- Helpers ----

def load_specs(file_path: str = SPECS_PATH) -> dict:
    with open(file_path, encoding="utf-8") as f:
        return json.load(f)


def _insert_ignore(conn, table, row: dict, index_elements) -> int:
    """
    Insert a row unless its natural key already exists.
    Returns 1 if a row was written, 0 otherwise.
    """
    stmt = sqlite_insert(table).values(**row).on_conflict_do_nothing(
        index_elements=index_elements,
    )
    return conn.execute(stmt).rowcount


def seed_database(engine, specs: dict, rng: random.Random = None) -> dict:
    """
    Populate the catalog tables and one seed price per instance type.

    specs maps provider code -> instance name -> spec dict, e.g.
      {"aws": {"g5.xlarge": {"family": "g5", "gpuModel": "A10G",
                             "gpuCount": 1, "vcpu": 4, "ramGB": 16, ...}}}

    Safe to run repeatedly: existing rows are left alone and instance
    types that already have a price are not priced again.
    """
    if rng is None:
        rng = random.Random()

    stats = {
        "gpu_models": 0,
        "providers": 0,
        "regions": 0,
        "instance_families": 0,
        "instance_types": 0,
        "prices": 0,
    }

    with engine.begin() as conn:
        # 1. GPU models
        for gpu in GPU_MODELS:
            stats["gpu_models"] += _insert_ignore(
                conn, gpu_models, gpu, [gpu_models.c.vendor, gpu_models.c.model]
            )

        gpu_model_ids = {
            row.model: row.id
            for row in conn.execute(
                select(gpu_models.c.id, gpu_models.c.model)
                .where(gpu_models.c.vendor == "NVIDIA")
            )
        }

        # 2. Providers
        for provider in PROVIDERS:
            stats["providers"] += _insert_ignore(
                conn, providers, provider, [providers.c.code]
            )

        provider_ids = {
            row.code: row.id
            for row in conn.execute(select(providers.c.id, providers.c.code))
        }

        # 3. Regions
        for provider_code, code, name, country_code, continent in REGIONS:
            stats["regions"] += _insert_ignore(
                conn,
                regions,
                {
                    "provider_id": provider_ids[provider_code],
                    "code": code,
                    "name": name,
                    "country_code": country_code,
                    "continent": continent,
                },
                [regions.c.provider_id, regions.c.code],
            )

        for provider_code, instances in specs.items():
            provider_id = provider_ids.get(provider_code)
            if provider_id is None:
                logger.warning("Skipping specs for unknown provider %r", provider_code)
                continue

            # 4. One family per family code, described by its first instance
            for spec in instances.values():
                gpu_model_id = gpu_model_ids.get(spec["gpuModel"])
                if gpu_model_id is None:
                    logger.warning("Unknown GPU model %r in specs", spec["gpuModel"])
                    continue

                training = spec.get("interconnect") == "NVSwitch"
                stats["instance_families"] += _insert_ignore(
                    conn,
                    instance_families,
                    {
                        "provider_id": provider_id,
                        "family_code": spec["family"],
                        "family_name": f"{spec['gpuModel']} {spec['family'].upper()} Family",
                        "gpu_model_id": gpu_model_id,
                        "description": (
                            f"{spec['gpuModel']} GPU instances for "
                            f"{'training' if training else 'inference'}"
                        ),
                        "interconnect_type": spec.get("interconnect"),
                        "use_case": "training" if training else "inference",
                    },
                    [instance_families.c.provider_id, instance_families.c.family_code],
                )

            family_ids = {
                row.family_code: row.id
                for row in conn.execute(
                    select(instance_families.c.id, instance_families.c.family_code)
                    .where(instance_families.c.provider_id == provider_id)
                )
            }
            region_ids = [
                row.id
                for row in conn.execute(
                    select(regions.c.id)
                    .where(regions.c.provider_id == provider_id)
                    .order_by(regions.c.id)
                )
            ]

            # 5. Instance types, one per region
            for instance_name, spec in instances.items():
                family_id = family_ids.get(spec["family"])
                if family_id is None:
                    continue

                for region_id in region_ids:
                    stats["instance_types"] += _insert_ignore(
                        conn,
                        instance_types,
                        {
                            "provider_id": provider_id,
                            "region_id": region_id,
                            "family_id": family_id,
                            "instance_name": instance_name,
                            "gpu_count": spec["gpuCount"],
                            "vcpu_count": spec.get("vcpu"),
                            "ram_gb": spec.get("ramGB"),
                            "local_ssd_gb": spec.get("localSsdGB") or 0,
                            "network_performance": spec.get("networkPerformance"),
                            "is_available": True,
                            "launch_date": LAUNCH_DATE,
                        },
                        [
                            instance_types.c.provider_id,
                            instance_types.c.region_id,
                            instance_types.c.instance_name,
                        ],
                    )

        # 6. Sample prices for instance types that have none yet
        priced = select(price_history.c.instance_type_id)
        unpriced = conn.execute(
            select(
                instance_types.c.id,
                instance_types.c.gpu_count,
                gpu_models.c.model.label("gpu_model"),
            )
            .select_from(
                instance_types
                .join(instance_families, instance_types.c.family_id == instance_families.c.id)
                .join(gpu_models, instance_families.c.gpu_model_id == gpu_models.c.id)
            )
            .where(instance_types.c.id.not_in(priced))
            .order_by(instance_types.c.id)
        ).mappings().all()

        for row in unpriced:
            base_price = BASE_PRICE_PER_GPU.get(row["gpu_model"], DEFAULT_BASE_PRICE)
            total_price = base_price * row["gpu_count"]
            # regional spread of +/-15%
            region_multiplier = rng.uniform(0.85, 1.15)
            amount = round(total_price * region_multiplier, 2)

            conn.execute(
                price_history.insert().values(
                    instance_type_id=row["id"],
                    purchase_option="on_demand",
                    unit="hour",
                    currency="USD",
                    price_amount=Decimal(str(amount)),
                    data_source="manual",
                    raw_response={
                        "source": "seed_data",
                        "basePrice": base_price,
                        "gpuCount": row["gpu_count"],
                        "regionMultiplier": region_multiplier,
                    },
                )
            )
            stats["prices"] += 1

    return stats


def main():
    specs = load_specs(SPECS_PATH)
    stats = seed_database(get_engine(), specs)

    logger.info("GPU models created:       %s", stats["gpu_models"])
    logger.info("Providers created:        %s", stats["providers"])
    logger.info("Regions created:          %s", stats["regions"])
    logger.info("Instance families created: %s", stats["instance_families"])
    logger.info("Instance types created:   %s", stats["instance_types"])
    logger.info("Seed prices created:      %s", stats["prices"])


if __name__ == "__main__":
    main()
