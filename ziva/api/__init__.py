# ziva/api/__init__.py
# =====================
# API Layer — Ziva
#
# Responsibility:
#   - Expose profile detection and the assistant over HTTP (FastAPI)
#   - Map missing required fields to 400 and unknown ids to 404
#
# Public API:
#   - create_app() — build the FastAPI application

from ziva.api.routes import create_app  # noqa: F401
