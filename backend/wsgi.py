# backend/wsgi.py
from adega import create_app

app = create_app()
