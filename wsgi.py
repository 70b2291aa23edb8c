# wsgi.py - entry point for gunicorn: gunicorn -c gunicorn.config.py wsgi:app
from app import create_app

app = create_app()
