# Gunicorn configuration
#
# Socket.IO keeps per-client state in process, so a single worker serves
# every connection; grading requests run concurrently on its threads.
bind = "127.0.0.1:8000"
workers = 1
worker_class = "gthread"
threads = 32
timeout = 120
keepalive = 5
errorlog = "/var/log/contest-backend/gunicorn-error.log"
accesslog = "/var/log/contest-backend/gunicorn-access.log"
loglevel = "info"
wsgi_app = "wsgi:app"
