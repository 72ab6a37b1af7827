# gpu_pricing/api/gpuaas.py

import json
import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from gpu_pricing.models.gpuaas import GpuaasPricesResponse

logger = logging.getLogger(__name__)

# relative to the process working directory
GPUAAS_PRICES_PATH = Path("data") / "gpuaas-prices.json"

router = APIRouter(prefix="/api/gpuaas", tags=["gpuaas"])


@router.get("/prices", response_model=GpuaasPricesResponse)
def get_gpuaas_prices():
    """
    Serve the GPU-as-a-service price sheet stored on disk, as-is.
    """
    try:
        data_path = Path.cwd() / GPUAAS_PRICES_PATH
        with open(data_path, encoding="utf-8") as f:
            data = json.load(f)
    except Exception:
        logger.exception("Failed to read gpuaas prices")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to load GPUaaS prices"},
        )

    return GpuaasPricesResponse(data=data)
