# gpu_pricing/db/engine.py

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

# file in project root unless overridden
DB_URL = os.environ.get("GPU_PRICING_DB_URL", "sqlite:///db.sqlite")


def get_engine() -> Engine:
    # echo=True if you want to see SQL printed in the terminal
    return create_engine(DB_URL, future=True)
