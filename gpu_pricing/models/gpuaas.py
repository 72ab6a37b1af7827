# gpu_pricing/models/gpuaas.py

from typing import Any

from gpu_pricing.models.base import CamelModel


class GpuaasPricesResponse(CamelModel):
    success: bool = True
    # file contents, passed through untouched
    data: Any
