from flask import Blueprint, jsonify

from app.campusflow.extensions import module_catalog, theme_registry

bp = Blueprint("routes", __name__)


@bp.get("/api/health")
def health():
    """Service banner plus the size of the in-process registries. No DB access."""
    return jsonify(
        {
            "status": "ok",
            "name": "Campus Flow API",
            "modules": len(module_catalog()),
            "themes": len(theme_registry().keys()),
        }
    )


@bp.get("/healthz")
def healthz():
    """Liveness probe for the platform router."""
    return "ok", 200
