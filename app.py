"""Compatibility shim exposing the Flask app for gunicorn (``gunicorn app:app``)."""

import os

from pdf_compress_api import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "5000")))
