# app.py
"""
Ticketron API entry point.

- Loads .env, configures logging, builds the Flask app
- MongoDB connection settings come from MONGO_URI / MONGO_DB
- Production: run behind a WSGI server, e.g. ``gunicorn app:app``
"""
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from ticketron import Settings, create_app

load_dotenv()

# -------------------------
# Configuration & Logging
# -------------------------
settings = Settings.from_env()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("ticketron")

app = create_app(settings)


if __name__ == "__main__":
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "5000"))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    logger.info("Server running at http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug, threaded=True)
