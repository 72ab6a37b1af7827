from fastapi import FastAPI

from gpu_pricing.api.gpuaas import router as gpuaas_router
from gpu_pricing.api.health import router as health_router
from gpu_pricing.api.instances import router as instances_router
from gpu_pricing.api.prices import router as prices_router
from gpu_pricing.api.providers import router as providers_router

app = FastAPI(
    title="GPU Cloud Pricing API",
    version="0.1.0",
)

@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(prices_router)
app.include_router(gpuaas_router)
app.include_router(health_router)
app.include_router(providers_router)
app.include_router(instances_router)
