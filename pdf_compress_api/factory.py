"""Flask app factory."""

from __future__ import annotations

from typing import Optional

from flask import Flask
from flask_cors import CORS

from pdf_compress_api import bootstrap
from pdf_compress_api.config import RuntimeConfig, load_runtime_config
from pdf_compress_api.routes.api_routes import api_bp
from pdf_compress_api.routes.web_routes import web_bp
from pdf_compress_api.services import compression_service


def create_app(config: Optional[RuntimeConfig] = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    runtime_config = config or load_runtime_config()
    compression_service.configure_app(app, runtime_config)
    CORS(
        app,
        origins=runtime_config.cors_origin,
        supports_credentials=True,
        expose_headers=compression_service.REPORT_HEADERS,
    )

    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp)
    compression_service.register_error_handlers(app)

    compression_service.log_effective_config(runtime_config)
    bootstrap.bootstrap_runtime(runtime_config)
    return app
