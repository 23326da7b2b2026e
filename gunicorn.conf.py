"""
Gunicorn configuration for the Fluzio rules service.

    gunicorn -c gunicorn.conf.py run:app
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Rule evaluation is CPU-light; most time is spent waiting on the database
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = 30
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
capture_output = True

proc_name = 'fluzio-rules'

preload_app = True
graceful_timeout = 30


def on_starting(server):
    print("[Gunicorn] Starting Fluzio rules service...")


def on_exit(server):
    print("[Gunicorn] Fluzio rules service shutting down...")
