import logging

from gpu_pricing.db.engine import get_engine
from gpu_pricing.db.schema import metadata

logger = logging.getLogger(__name__)


def main():
    engine = get_engine()
    metadata.drop_all(engine)
    metadata.create_all(engine)
    logger.info("DB schema created.")

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    main()
