"""WSGI entry point: ``flask --app app run`` or ``gunicorn app:app``.

Reads ``.env`` from the project root (unless FLASK_SKIP_DOTENV is set) so
Stripe keys, SMTP credentials and the root admin account can live there
during development.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent
_TRUTHY = {"1", "true", "yes", "on"}

if os.getenv("FLASK_SKIP_DOTENV", "").lower() not in _TRUTHY:
    load_dotenv(PROJECT_ROOT / ".env", override=False)

from exam_app import create_app  # noqa: E402

app = create_app(os.getenv("FLASK_CONFIG"))


if __name__ == "__main__":  # pragma: no cover
    port = int(os.getenv("PORT") or os.getenv("FLASK_RUN_PORT") or 5000)
    app.logger.info("Starting development server on port %s", port)
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=port, debug=app.config.get("DEBUG", False))
