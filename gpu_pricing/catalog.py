# gpu_pricing/catalog.py
"""
Instance catalog: registry prices joined with the hardware specs on disk.

Instance ids are "<provider>-<instance name>" and split on the first dash,
so "gcp-a3-highgpu-8g" is provider "gcp", instance "a3-highgpu-8g". A
priced instance with no matching spec entry is left out of the catalog.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from gpu_pricing.calc import price_per_gpu
from gpu_pricing.models.instances import InstanceListing, InstanceSpecs
from gpu_pricing.models.prices import PriceEntry

logger = logging.getLogger(__name__)

# relative to the process working directory
INSTANCE_SPECS_PATH = Path("data") / "instance-specs.json"

# every registry price is quoted for one region per provider
REGION_BY_PROVIDER = {
    "aws": "ap-northeast-2",
    "azure": "koreacentral",
    "gcp": "asia-northeast1",
}
UNKNOWN_REGION = "unknown"

SpecsTable = Dict[str, Dict[str, InstanceSpecs]]


def split_instance_id(instance_id: str) -> Tuple[str, str]:
    provider, _, instance_name = instance_id.partition("-")
    return provider.lower(), instance_name


def load_instance_specs(path: Optional[Path] = None) -> SpecsTable:
    """
    Read the specs file into {provider: {instance name: InstanceSpecs}}.
    Missing or malformed files raise.
    """
    data_path = Path.cwd() / (path or INSTANCE_SPECS_PATH)
    with open(data_path, encoding="utf-8") as f:
        raw = json.load(f)

    return {
        provider.lower(): {
            name: InstanceSpecs.model_validate(spec)
            for name, spec in instances.items()
        }
        for provider, instances in raw.items()
    }


def find_specs(specs: SpecsTable, instance_id: str) -> Optional[InstanceSpecs]:
    provider, instance_name = split_instance_id(instance_id)
    return specs.get(provider, {}).get(instance_name)


def build_listing(instance_id: str, entry: PriceEntry, spec: InstanceSpecs) -> InstanceListing:
    provider, instance_name = split_instance_id(instance_id)
    return InstanceListing(
        id=instance_id,
        provider=provider.upper(),
        region=REGION_BY_PROVIDER.get(provider, UNKNOWN_REGION),
        instance_name=instance_name,
        specs=spec,
        price_per_hour=entry.price_per_hour,
        price_per_gpu=price_per_gpu(entry.price_per_hour, spec.gpu_count),
        currency=entry.currency,
        last_updated=entry.last_updated,
    )


def build_catalog(prices: Mapping[str, PriceEntry], specs: SpecsTable) -> List[InstanceListing]:
    """Every priced instance that has specs, in registry order."""
    listings: List[InstanceListing] = []
    for instance_id, entry in prices.items():
        spec = find_specs(specs, instance_id)
        if spec is None:
            logger.debug("No specs for %s, left out of the catalog", instance_id)
            continue
        listings.append(build_listing(instance_id, entry, spec))
    return listings
