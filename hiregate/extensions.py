from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from redis import Redis
from rq import Queue
from flask import current_app

# RQ-only keyword arguments that must not reach the job function when it runs inline
RQ_KEYS = {'job_timeout', 'timeout', 'at_front', 'depends_on', 'result_ttl', 'ttl',
           'failure_ttl', 'meta', 'description', 'job_id'}


class RQWrapper:
    def __init__(self):
        self.redis = None
        self.queue = None

    def init_app(self, app):
        if app.config.get("RQ_SYNC"):
            self.redis = None
            self.queue = None
            return
        try:
            self.redis = Redis.from_url(app.config.get("REDIS_URL"))
            self.queue = Queue(app.config.get("RQ_QUEUE_NAME", "default"), connection=self.redis)
        except Exception:
            # no redis on this machine: run jobs inline
            app.logger.exception('Redis/RQ init failed, falling back to sync execution')
            self.redis = None
            self.queue = None

    def _run_inline(self, func, func_args, kwargs):
        safe_kwargs = {k: v for k, v in kwargs.items() if k not in RQ_KEYS}
        try:
            return func(*func_args, **safe_kwargs)
        except Exception:
            current_app.logger.exception('Synchronous execution of %s failed', getattr(func, '__name__', func))
        return None

    def enqueue(self, func, *args, **kwargs):
        """Enqueue ``func`` on RQ, or run it inline when no queue is reachable.

        Failures of an inline run are logged and swallowed so the caller that
        dispatched the job never fails because of it.
        """
        if not self.queue:
            return self._run_inline(func, args, kwargs)

        try:
            return self.queue.enqueue(func, *args, **kwargs)
        except Exception:
            current_app.logger.exception('RQ enqueue failed, falling back to sync execution')
            return self._run_inline(func, args, kwargs)


db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
rq = RQWrapper()
