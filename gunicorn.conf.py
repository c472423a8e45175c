# Gunicorn configuration file for the MindQuest API
# https://docs.gunicorn.org/en/stable/settings.html
# Run with: gunicorn -c gunicorn.conf.py wsgi:app

import multiprocessing
import os

# Server socket (a reverse proxy terminates TLS in front of it)
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:5000")
backlog = 2048

# Worker processes. Request handlers are short, synchronous database work.
workers = int(os.environ.get("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
timeout = 30
keepalive = 5
max_requests = 1000
max_requests_jitter = 50

# Server mechanics
daemon = False  # Let systemd manage the daemon
pidfile = os.environ.get("GUNICORN_PIDFILE")

# Logging goes to stdout/stderr; the app writes its own rotating logs under logs/
errorlog = "-"
accesslog = "-"
loglevel = os.environ.get("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "mindquest"

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def post_fork(server, worker):
    """Each worker opens its own database connections."""
    server.log.info(f"Worker spawned (pid: {worker.pid})")
