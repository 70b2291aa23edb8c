import os

# gevent workers: one greenlet per request, each with its own scoped db session
worker_class = "gevent"
workers = int(os.getenv("WEB_CONCURRENCY", "4"))
worker_connections = 1000
timeout = 120
bind = "0.0.0.0:{}".format(os.getenv("PORT", "10000"))
wsgi_app = "wsgi:app"

loglevel = "info"
accesslog = "-"
errorlog = "-"
