# create_tables.py
from database import engine, Base
from signflow.logging import get_logger
# Importa todos los modelos para que se registren con Base
from signflow.documents.models.document import Document
from signflow.documents.models.signing_event import SigningEvent

logger = get_logger(__name__)


def create_tables():
    """Crea todas las tablas en la base de datos"""
    logger.info("Tables to create: %s", list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    create_tables()
