from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from signflow.config import Config
from signflow.documents.repositories.document_store import DocumentStore
from signflow.documents.services.cleanup import delete_expired_documents
from signflow.logging import get_logger

logger = get_logger(__name__)


def start_deletion_job(
    store_factory: Callable[[], DocumentStore],
    interval_hours: int = Config.CLEANUP_INTERVAL_HOURS,
) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()

    def job():
        delete_expired_documents(store_factory())

    # Una sola ejecución a la vez; un barrido atrasado se fusiona con el siguiente
    scheduler.add_job(
        job, 'interval', hours=interval_hours,
        id="expired-documents-cleanup", max_instances=1, coalesce=True,
    )
    scheduler.start()
    logger.info("Expired document cleanup scheduled every %d hour(s)", interval_hours)
    return scheduler
