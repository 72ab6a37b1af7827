# gpu_pricing/registry.py
"""
In-memory registry of current GPU instance prices.

The registry is the single source of truth for "current price". Every
successful change made through a bulk update is also written to an
append-only audit log. Nothing here is persisted: the registry is seeded
from SEED_PRICES when the process starts and is lost on restart.
"""

import itertools
import logging
import math
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from gpu_pricing.calc import change_percent
from gpu_pricing.models.prices import (
    PriceEntry,
    PriceUpdateItem,
    PriceUpdateLog,
    PriceUpdateResult,
)

logger = logging.getLogger(__name__)

# USD per hour
SEED_PRICES: Dict[str, float] = {
    # AWS
    "aws-p5d.24xlarge": 98.32,
    "aws-p4d.24xlarge": 32.77,
    "aws-g5.xlarge": 1.006,
    "aws-g5.2xlarge": 1.89,
    # Azure
    "azure-Standard_ND_H100_v5": 89.76,
    "azure-Standard_ND96amsr_A100_v4": 27.20,
    "azure-Standard_ND40rs_v2": 19.44,
    # GCP
    "gcp-a3-highgpu-8g": 91.45,
    "gcp-a2-highgpu-8g": 29.89,
    "gcp-g2-standard-4": 0.736,
}

DEFAULT_CURRENCY = "USD"
DEFAULT_UPDATED_BY = "admin"  # no authenticated user yet
RECENT_LOG_LIMIT = 50

NOT_FOUND_ERROR = "Instance not found"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceRegistry:
    def __init__(self, seed: Optional[Mapping[str, float]] = None):
        if seed is None:
            seed = SEED_PRICES

        now = _utcnow()
        self._prices: Dict[str, PriceEntry] = {
            instance_id: PriceEntry(
                price_per_hour=price,
                currency=DEFAULT_CURRENCY,
                last_updated=now,
            )
            for instance_id, price in seed.items()
        }
        self._logs: List[PriceUpdateLog] = []
        self._log_seq = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def prices(self) -> Dict[str, PriceEntry]:
        """The live mapping. Callers must not mutate it directly."""
        return self._prices

    def snapshot(self) -> Dict[str, PriceEntry]:
        with self._lock:
            return dict(self._prices)

    def _next_log_id(self) -> str:
        # zero-padded sequence keeps ids sortable; the uuid part keeps them
        # unique across registries
        return f"log_{next(self._log_seq):08d}_{uuid.uuid4().hex[:9]}"

    def apply_updates(
        self,
        updates: Sequence[PriceUpdateItem],
        updated_by: str = DEFAULT_UPDATED_BY,
    ) -> Tuple[List[PriceUpdateResult], datetime]:
        """
        Apply a validated batch of price changes in order.

        Unknown instance ids produce a failed result and do not stop the
        batch. Items already applied are kept even if later ones fail.
        Returns the per-item results (input order) and the timestamp
        shared by every change in the batch.
        """
        timestamp = _utcnow()
        results: List[PriceUpdateResult] = []

        with self._lock:
            for update in updates:
                current = self._prices.get(update.instance_id)

                if current is None:
                    results.append(
                        PriceUpdateResult(
                            instance_id=update.instance_id,
                            success=False,
                            error=NOT_FOUND_ERROR,
                        )
                    )
                    continue

                old_price = current.price_per_hour
                new_price = update.new_price

                self._prices[update.instance_id] = PriceEntry(
                    price_per_hour=new_price,
                    currency=update.currency,
                    last_updated=timestamp,
                )

                self._logs.append(
                    PriceUpdateLog(
                        id=self._next_log_id(),
                        instance_id=update.instance_id,
                        old_price=old_price,
                        new_price=new_price,
                        updated_at=timestamp,
                        updated_by=updated_by,
                    )
                )

                results.append(
                    PriceUpdateResult(
                        instance_id=update.instance_id,
                        success=True,
                        old_price=old_price,
                        new_price=new_price,
                        change=new_price - old_price,
                        change_percent=change_percent(old_price, new_price),
                    )
                )

        n_success = sum(1 for r in results if r.success)
        logger.info(
            "Applied price batch: %s updated, %s not found",
            n_success,
            len(results) - n_success,
        )
        return results, timestamp

    def update_price(
        self,
        instance_id: str,
        price_per_hour: float,
        currency: str = DEFAULT_CURRENCY,
    ) -> bool:
        """
        Overwrite a single entry without writing to the audit log.
        Returns False when the instance is unknown.
        """
        if not math.isfinite(price_per_hour) or price_per_hour < 0:
            raise ValueError("price_per_hour must be a finite number >= 0")

        with self._lock:
            if instance_id not in self._prices:
                return False
            self._prices[instance_id] = PriceEntry(
                price_per_hour=price_per_hour,
                currency=currency,
                last_updated=_utcnow(),
            )
        return True

    def recent_logs(self, limit: int = RECENT_LOG_LIMIT) -> List[PriceUpdateLog]:
        """The last `limit` log entries, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(self._logs[-limit:])

    def all_logs(self) -> Tuple[PriceUpdateLog, ...]:
        with self._lock:
            return tuple(self._logs)


default_registry = PriceRegistry()


def get_registry() -> PriceRegistry:
    return default_registry


def get_current_prices() -> Dict[str, PriceEntry]:
    return get_registry().prices


def update_price(instance_id: str, price_per_hour: float, currency: str = DEFAULT_CURRENCY) -> bool:
    return get_registry().update_price(instance_id, price_per_hour, currency)
