"""Health routes."""

from flask import Blueprint

from pdf_compress_api.services import compression_service

web_bp = Blueprint("web", __name__)


@web_bp.get("/health")
def health():
    return compression_service.health()


@web_bp.get("/favicon.ico")
def favicon():
    return compression_service.favicon()
