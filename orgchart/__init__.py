"""JSON REST API for the departments and jobs of an organisation chart, over WSGI and SQLite."""

__version__ = "0.1.0"