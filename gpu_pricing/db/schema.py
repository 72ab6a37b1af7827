# gpu_pricing/db/schema.py

from datetime import datetime, timezone

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Float, Boolean,
    Numeric, Date, DateTime, ForeignKey, CheckConstraint, JSON, Text,
    UniqueConstraint,
)

metadata = MetaData()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


gpu_models = Table(
    "gpu_models",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("vendor", String, nullable=False),
    Column("model", String, nullable=False),
    Column("architecture", String),
    Column("vram_gb", Integer),
    Column("memory_type", String),
    Column("memory_bandwidth_gbps", Integer),
    Column("fp16_tflops", Float),
    Column("bf16_tflops", Float),
    Column("int8_tops", Float),
    Column("nvlink_support", Boolean, nullable=False, default=False),
    Column("mig_support", Boolean, nullable=False, default=False),
    UniqueConstraint("vendor", "model", name="uq_gpu_models_vendor_model"),
)

providers = Table(
    "providers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", String, nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("logo_url", String),
    Column("api_endpoint", String),
)

regions = Table(
    "regions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider_id", Integer, ForeignKey("providers.id"), nullable=False),
    Column("code", String, nullable=False),
    Column("name", String, nullable=False),
    Column("country_code", String),
    Column("continent", String),
    UniqueConstraint("provider_id", "code", name="uq_regions_provider_code"),
)

instance_families = Table(
    "instance_families",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider_id", Integer, ForeignKey("providers.id"), nullable=False),
    Column("family_code", String, nullable=False),
    Column("family_name", String),
    Column("gpu_model_id", Integer, ForeignKey("gpu_models.id"), nullable=False),
    Column("description", Text),
    Column("interconnect_type", String),
    Column("use_case", String),
    UniqueConstraint("provider_id", "family_code", name="uq_families_provider_code"),
)

instance_types = Table(
    "instance_types",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider_id", Integer, ForeignKey("providers.id"), nullable=False),
    Column("region_id", Integer, ForeignKey("regions.id"), nullable=False),
    Column("family_id", Integer, ForeignKey("instance_families.id"), nullable=False),
    Column("instance_name", String, nullable=False),
    Column("gpu_count", Integer, nullable=False),
    Column("vcpu_count", Integer),
    Column("ram_gb", Integer),
    Column("local_ssd_gb", Integer, default=0),
    Column("network_performance", String),
    Column("is_available", Boolean, nullable=False, default=True),
    Column("launch_date", Date),
    UniqueConstraint(
        "provider_id", "region_id", "instance_name",
        name="uq_instance_types_provider_region_name",
    ),
)

price_history = Table(
    "price_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("instance_type_id", Integer, ForeignKey("instance_types.id"), nullable=False),
    Column("purchase_option", String, nullable=False, default="on_demand"),
    Column("unit", String, nullable=False, default="hour"),
    Column("currency", String, nullable=False, default="USD"),
    Column("price_amount", Numeric(12, 4), nullable=False),
    Column("effective_date", DateTime, nullable=False, default=_utcnow),
    Column("data_source", String),
    Column("raw_response", JSON),
    Column("created_at", DateTime, nullable=False, default=_utcnow),
    CheckConstraint("price_amount >= 0", name="ck_price_history_amount_nonneg"),
)
