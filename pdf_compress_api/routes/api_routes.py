"""API routes."""

from flask import Blueprint

from pdf_compress_api.services import compression_service

api_bp = Blueprint("api", __name__, url_prefix="/api")

api_bp.add_url_rule(
    "/compress",
    endpoint="compress",
    view_func=compression_service.compress,
    methods=["POST"],
)
api_bp.add_url_rule(
    "/presets",
    endpoint="presets",
    view_func=compression_service.list_presets,
    methods=["GET"],
)
