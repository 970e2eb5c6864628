"""Gunicorn production configuration for the dashboard API."""
import multiprocessing
import os

wsgi_app = "boerenkompas.main:app"
bind = os.environ.get("BIND", "0.0.0.0:8000")
# Each KPI request fans out into several DB queries; keep workers moderate.
workers = int(os.environ.get("WEB_CONCURRENCY", multiprocessing.cpu_count() + 1))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
graceful_timeout = 30
keepalive = 5
max_requests = 1000
max_requests_jitter = 100
accesslog = "-"
errorlog = "-"
loglevel = "info"
