from celery import shared_task
from core.logger import log

# Приложение воркера создаётся один раз на процесс
_worker_app = None


def get_worker_app():
    """Flask application of this worker process, built on first use."""
    global _worker_app
    if _worker_app is None:
        from web.app import create_app
        _worker_app = create_app()
    return _worker_app


@shared_task(name='tasks.cleanup.purge_expired_sessions')
def purge_expired_sessions():
    """Удаляет просроченные записи сессий администраторов."""
    from web.extensions import services

    with get_worker_app().app_context():
        try:
            purged = services().auth.purge_expired_sessions()
        except Exception as e:
            log.error(f"Session purge failed: {e}")
            raise
    return {'purged': purged}
