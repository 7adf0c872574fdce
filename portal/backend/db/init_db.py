import logging
from typing import Optional

from sqlalchemy.engine import Engine

from portal.backend.db.base_class import Base
from portal.backend.db.session import engine as default_engine

# registers every table on Base.metadata
from portal.backend.models import assignment, auth_token, submission, user  # noqa: F401

logger = logging.getLogger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    bind = bind if bind is not None else default_engine
    Base.metadata.create_all(bind=bind)
    logger.info("schema ready on %s", bind.url.render_as_string(hide_password=True))
