# app.py
from __future__ import annotations

import logging
import os

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from datastore import Datastore
from ratelimit import init_rate_limit

# Blueprints
from routes.auth import auth_bp
from routes.vehicles import vehicles_bp
from routes.tickets import tickets_bp
from routes.planner import planner_bp
from routes.staff import staff_bp

API_PREFIX = "/api"


def create_app(config_object=Config, datastore: Datastore | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
    )

    # Respect reverse proxy headers so the limiter sees the real client address
    if app.config.get("TRUST_PROXY"):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore[arg-type]

    CORS(
        app,
        resources={rf"{API_PREFIX}/*": {"origins": app.config["FRONTEND_URL"]}},
        supports_credentials=True,
    )

    (datastore or Datastore()).init_app(app)
    init_rate_limit(app, prefix=f"{API_PREFIX}/")

    @app.after_request
    def add_security_headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.path.startswith(API_PREFIX):
            resp.headers.setdefault("Cache-Control", "no-store")
        return resp

    # Health check
    @app.get(f"{API_PREFIX}/health")
    def health_check():
        return jsonify(status="OK", message=f"{app.config['APP_NAME']} is running"), 200

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify(error="Route not found"), 404

    # Global error handler
    @app.errorhandler(Exception)
    def handle_any_error(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify(error=e.description), e.code
        app.logger.exception("[app] unhandled error on %s %s", request.method, request.path)
        return jsonify(error="Internal server error"), 500

    # Register blueprints
    app.register_blueprint(auth_bp,     url_prefix=f"{API_PREFIX}/auth")
    app.register_blueprint(vehicles_bp, url_prefix=f"{API_PREFIX}/vehicles")
    app.register_blueprint(tickets_bp,  url_prefix=f"{API_PREFIX}/tickets")
    app.register_blueprint(planner_bp,  url_prefix=f"{API_PREFIX}/routes")
    app.register_blueprint(staff_bp,    url_prefix=f"{API_PREFIX}/staff")

    # CLI: load the demo fleet into the vehicles table
    @app.cli.command("seed-vehicles")
    def seed_vehicles_cmd():
        from seed import seed_vehicles
        created = seed_vehicles(app.extensions["datastore"])
        print(f"Seeded {created} vehicle(s).")

    return app


# Optional local entrypoint (useful for quick dev runs)
if __name__ == "__main__":
    app = create_app()
    app.run(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        debug=bool(os.environ.get("FLASK_DEBUG", "")),
    )
