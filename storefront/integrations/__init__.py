"""Adapters for external collaborators: local storage, REST API, Postgres."""
