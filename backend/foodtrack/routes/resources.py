# Overview: Flask API routes for tenant-owned entities, built from one CRUD blueprint factory.

"""
Tenant-scoped CRUD routes

Every entity kind exposes the same five routes:

    POST   /api/<kind>          -> 201 entity
    GET    /api/<kind>          -> 200 [entity, ...]
    GET    /api/<kind>/<id>     -> 200 entity | 404
    PUT    /api/<kind>/<id>     -> 200 entity | 404
    DELETE /api/<kind>/<id>     -> 204 | 404

All routes require a bearer token; the repository receives g.org_id and
never sees another tenant's rows.
"""

from flask import Blueprint, jsonify, g

from ..decorators import require_auth
from ..services import production_service, quality_service
from ..services.repository import TenantRepository
from ..validation import json_body


def make_crud_blueprint(name: str, url_prefix: str, repository: TenantRepository) -> Blueprint:
    bp = Blueprint(name, __name__, url_prefix=url_prefix)

    @bp.post("")
    @require_auth
    def create_route():
        data = json_body()
        entity = repository.create(data, g.org_id)
        return jsonify(entity.to_dict()), 201

    @bp.get("")
    @require_auth
    def list_route():
        return jsonify([e.to_dict() for e in repository.list(g.org_id)])

    @bp.get("/<int:entity_id>")
    @require_auth
    def get_route(entity_id: int):
        return jsonify(repository.get(entity_id, g.org_id).to_dict())

    @bp.put("/<int:entity_id>")
    @require_auth
    def update_route(entity_id: int):
        data = json_body()
        entity = repository.update(entity_id, data, g.org_id)
        return jsonify(entity.to_dict())

    @bp.delete("/<int:entity_id>")
    @require_auth
    def delete_route(entity_id: int):
        repository.delete(entity_id, g.org_id)
        return "", 204

    return bp


employees_bp = make_crud_blueprint("employees", "/api/employees", production_service.employees)
ingredients_bp = make_crud_blueprint("ingredients", "/api/ingredients", production_service.ingredients)
recipes_bp = make_crud_blueprint("recipes", "/api/recipes", production_service.recipes)
batches_bp = make_crud_blueprint("batches", "/api/batches", production_service.batches)
problem_logs_bp = make_crud_blueprint("problem_logs", "/api/problemlogs", quality_service.problem_logs)
receiving_logs_bp = make_crud_blueprint("receiving_logs", "/api/receivinglogs", quality_service.receiving_logs)

RESOURCE_BLUEPRINTS = (
    employees_bp,
    ingredients_bp,
    recipes_bp,
    batches_bp,
    problem_logs_bp,
    receiving_logs_bp,
)
