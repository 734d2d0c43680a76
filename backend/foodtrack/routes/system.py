# backend/foodtrack/routes/system.py
"""
System health endpoint.

GET /health answers without authentication and without touching the
database; it reports that the process is up and serving requests.
"""

from flask import Blueprint, jsonify

system_bp = Blueprint("system", __name__)


@system_bp.get("/health")
def health_route():
    return jsonify({"status": "healthy"}), 200
