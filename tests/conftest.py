"""Shared fixtures: a fresh price registry, a throwaway SQLite database and
an HTTP client bound to the application.

The registry and database URL are module-level globals in the application,
so each fixture swaps them out with ``monkeypatch`` and pytest restores the
originals after every test.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from gpu_pricing import registry as registry_module
from gpu_pricing.db import engine as engine_module
from gpu_pricing.db.schema import (
    gpu_models,
    instance_families,
    instance_types,
    metadata,
    price_history,
    providers,
    regions,
)
from gpu_pricing.main import app


@pytest.fixture
def registry(monkeypatch):
    fresh = registry_module.PriceRegistry()
    monkeypatch.setattr(registry_module, "default_registry", fresh)
    return fresh


@pytest.fixture
def client(registry):
    return TestClient(app)


@pytest.fixture
def db_engine(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'test.sqlite'}"
    monkeypatch.setattr(engine_module, "DB_URL", url)

    engine = create_engine(url, future=True)
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def catalog(db_engine):
    """
    A small hand-built catalog:

    aws / us-west-2:      p5.48xlarge (8x H100), g6.xlarge, g6.2xlarge (1x L4)
    aws / ap-northeast-2: p5.48xlarge, g6.nogpu (0 GPUs)
    gcp:                  no regions
    """
    with db_engine.begin() as conn:
        conn.execute(gpu_models.insert(), [
            {"id": 1, "vendor": "NVIDIA", "model": "H100"},
            {"id": 2, "vendor": "NVIDIA", "model": "L4"},
        ])
        conn.execute(providers.insert(), [
            {"id": 1, "code": "aws", "name": "Amazon Web Services"},
            {"id": 2, "code": "gcp", "name": "Google Cloud Platform"},
        ])
        conn.execute(regions.insert(), [
            {"id": 1, "provider_id": 1, "code": "us-west-2", "name": "US West (Oregon)", "country_code": "US"},
            {"id": 2, "provider_id": 1, "code": "ap-northeast-2", "name": "Asia Pacific (Seoul)", "country_code": "KR"},
        ])
        conn.execute(instance_families.insert(), [
            {"id": 1, "provider_id": 1, "family_code": "p5", "gpu_model_id": 1},
            {"id": 2, "provider_id": 1, "family_code": "g6", "gpu_model_id": 2},
        ])
        conn.execute(instance_types.insert(), [
            {"id": 1, "provider_id": 1, "region_id": 1, "family_id": 1,
             "instance_name": "p5.48xlarge", "gpu_count": 8, "vcpu_count": 192, "ram_gb": 2048},
            {"id": 2, "provider_id": 1, "region_id": 1, "family_id": 2,
             "instance_name": "g6.xlarge", "gpu_count": 1, "vcpu_count": 4, "ram_gb": 16},
            {"id": 3, "provider_id": 1, "region_id": 1, "family_id": 2,
             "instance_name": "g6.2xlarge", "gpu_count": 1, "vcpu_count": 8, "ram_gb": 32},
            {"id": 4, "provider_id": 1, "region_id": 2, "family_id": 1,
             "instance_name": "p5.48xlarge", "gpu_count": 8, "vcpu_count": 192, "ram_gb": 2048},
            {"id": 5, "provider_id": 1, "region_id": 2, "family_id": 2,
             "instance_name": "g6.nogpu", "gpu_count": 0, "vcpu_count": 2, "ram_gb": 8},
        ])
        conn.execute(price_history.insert(), [
            _price(1, 1, "on_demand", "30.00", datetime(2025, 1, 1), datetime(2025, 1, 1)),
            _price(2, 1, "on_demand", "32.50", datetime(2025, 2, 1), datetime(2025, 2, 1)),
            _price(3, 1, "spot", "10.00", datetime(2025, 3, 1), datetime(2025, 3, 1)),
            _price(4, 2, "on_demand", "0.80", datetime(2025, 1, 1), datetime(2025, 1, 2)),
            _price(5, 4, "on_demand", "35.00", datetime(2025, 1, 1), datetime(2025, 1, 3)),
            _price(6, 5, "on_demand", "1.00", datetime(2025, 1, 1), datetime(2025, 3, 2)),
        ])
    return db_engine


def _price(id_, instance_type_id, option, amount, effective, created):
    return {
        "id": id_,
        "instance_type_id": instance_type_id,
        "purchase_option": option,
        "unit": "hour",
        "currency": "USD",
        "price_amount": Decimal(amount),
        "effective_date": effective,
        "created_at": created,
    }
