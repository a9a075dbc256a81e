import logging

from celery import Celery
from celery.signals import setup_logging, worker_ready

from rankwise.config import settings
from rankwise.db.database import init_indexes

celery_app = Celery(
    "rankwise_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND or None,
    include=["rankwise.worker.tasks"],
)

celery_app.conf.update(
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_routes={
        'evaluate_attempt': {'queue': 'evaluation'}
    }
)


@setup_logging.connect
def configure_logging(**kwargs):
    # replaces celery's own root logger setup
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


@worker_ready.connect
def create_indexes(**kwargs):
    # create indexes once at startup, create_index is a no-op when they exist
    init_indexes()
