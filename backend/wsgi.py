# backend/wsgi.py
from gasflow import create_app

app = create_app()
