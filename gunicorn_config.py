"""Gunicorn configuration file.

Sized for an I/O-bound service: each worker runs one event loop that spends
its time waiting on routing backends.
"""

import logging
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"
backlog = 1024

workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"

# longer than any backend deadline so gunicorn never kills an in-flight route
timeout = 30
graceful_timeout = 15
keepalive = 5

errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info")
accesslog = "-"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(L)ss'
logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s [%(process)d] [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "[%Y-%m-%d %H:%M:%S %z]",
        },
        "access": {
            "format": "%(message)s",
        },
    },
    "handlers": {
        "error_console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
        "access_console": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "gunicorn.error": {
            "level": loglevel.upper(),
            "handlers": ["error_console"],
            "propagate": False,
        },
        "gunicorn.access": {
            "level": "INFO",
            "handlers": ["access_console"],
            "propagate": False,
        },
    },
    "root": {
        "level": loglevel.upper(),
        "handlers": ["error_console"],
    },
}

proc_name = "spinroute-routing"

max_requests = 2000
max_requests_jitter = 200

preload_app = False

wsgi_app = "app:app"

daemon = False


def on_starting(_server):
    """Log when server starts."""
    logging.getLogger("gunicorn.error").info(
        "Starting Gunicorn with %d workers, timeout %ds", workers, timeout
    )


def on_exit(_server):
    logging.getLogger("gunicorn.error").info("Gunicorn server shutting down.")


def worker_abort(worker):
    """Log worker timeouts."""
    logging.getLogger("gunicorn.error").warning(
        "Worker %d was aborted due to timeout",
        worker.pid,
    )
