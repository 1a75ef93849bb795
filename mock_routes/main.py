import os
from pathlib import Path

import yaml
from flask import Flask, abort, jsonify

ROOT = Path(__file__).resolve().parent
DEFAULT_ROUTES_FILE = ROOT / "routes.yaml"


def load_routes(path: Path) -> dict:
    """Read route fixtures keyed by name; unreadable or malformed files yield no routes."""
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        return {}
    entries = data.get("routes", []) if isinstance(data, dict) else []
    routes = {}
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        name = str(entry["name"])
        routes[name] = {
            "name": name,
            "source": entry.get("source", ""),
            "dest": entry.get("dest", ""),
            "module": entry.get("module", ""),
        }
    return routes


def create_app(routes_file=None) -> Flask:
    app = Flask(__name__)
    path = Path(routes_file or os.environ.get("MOCK_ROUTES_FILE", DEFAULT_ROUTES_FILE))
    app.config["ROUTES"] = load_routes(path)

    @app.route("/health", methods=["GET", "HEAD"])
    def health_check():
        """Liveness endpoint, handy as an external node in the fixtures."""
        return jsonify(status="UP"), 200

    @app.route("/routes", methods=["GET"])
    def list_routes():
        """Route names in fixture order."""
        return jsonify(list(app.config["ROUTES"].keys()))

    @app.route("/routes/<path:name>", methods=["GET"])
    def get_route(name):
        route = app.config["ROUTES"].get(name)
        if route is None:
            abort(404, description=f"Route {name} not found")
        return jsonify(route)

    return app


if __name__ == "__main__":
    # Same port the inspector expects for its upstream by default
    create_app().run(host="0.0.0.0", port=8080)
