# seed_data.py
"""
Recreate the schema and load the GPU catalog plus sample prices.

Usage example:
    python seed_data.py
"""

from scripts import init_db
from scripts.seed import SPECS_PATH, load_specs, seed_database
from gpu_pricing.db.engine import get_engine


def main():
    init_db.main()
    stats = seed_database(get_engine(), load_specs(SPECS_PATH))

    print("Seed complete.")
    print(f"GPU models:       {stats['gpu_models']}")
    print(f"Providers:        {stats['providers']}")
    print(f"Regions:          {stats['regions']}")
    print(f"Instance types:   {stats['instance_types']}")
    print(f"Prices:           {stats['prices']}")


if __name__ == "__main__":
    main()
