# app.py
"""
Thin entrypoint for the API.

Usage example:
    uvicorn app:app --reload
"""

from gpu_pricing.main import app  # re-export FastAPI instance
