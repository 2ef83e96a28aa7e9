import os

# Application
wsgi_app = "authcore:create_app()"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:4000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by the container runtime)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Proxy headers are trusted by ProxyFix inside the app
forwarded_allow_ips = "*"
proxy_protocol = False
