"""Shared Flask extensions for the StoryPath blueprints and the local store."""

from flask_sqlalchemy import SQLAlchemy

# SQLAlchemy instance initialized in app.py so storage/blueprints can import `db`.
db = SQLAlchemy()
