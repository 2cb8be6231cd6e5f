from celery import Celery
from core.config import Config

celery_app = Celery(
    'tasks',
    broker=Config.CELERY_BROKER_URL,
    backend=Config.CELERY_RESULT_BACKEND,
    include=[
        'tasks.cleanup'
    ]
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,
    beat_schedule={
        'purge-expired-admin-sessions': {
            'task': 'tasks.cleanup.purge_expired_sessions',
            'schedule': 60 * 60,
        },
    },
)

if __name__ == '__main__':
    celery_app.start()
