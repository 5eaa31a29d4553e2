from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base
import logging

from moviehub.config import STORE_URL, STORE_ECHO

logger = logging.getLogger(__name__)

# Local durable store - SQLite file by default, holds the session record
engine = create_engine(
    STORE_URL,
    connect_args={"check_same_thread": False} if STORE_URL.startswith("sqlite") else {},
    echo=STORE_ECHO  # Set MOVIEHUB_STORE_ECHO=true for SQL debugging
)

@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    logger.debug("Local store connection established")

Base = declarative_base()
