# Run with: gunicorn -c gunicorn.conf.py "accounts:create_app()"
import os

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = 1
# Uploads to the media host happen inside the request
timeout = 90
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by the container runtime)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust X-Forwarded-* so Secure cookies see the original scheme
forwarded_allow_ips = "*"
proxy_protocol = False
