from __future__ import annotations

import logging

from vendeai.infrastructure.db.engine import Base, get_engine
from vendeai.infrastructure.db.models import accounts as _accounts_models  # noqa: F401
from vendeai.shared.config import get_settings


logger = logging.getLogger(__name__)


def create_schema(engine) -> None:
    """Create missing tables. Existing tables are left as they are."""
    Base.metadata.create_all(engine)
    logger.info("db: schema_ready tables=%s", ",".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    if not settings.database_url:
        raise SystemExit("DATABASE_URL is required.")
    create_schema(get_engine(settings.database_url))
