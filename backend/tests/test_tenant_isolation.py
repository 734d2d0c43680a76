# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that cross-tenant access is denied for every entity.

Two organizations each get their own token, then verify that:
1. Org A cannot read, update or delete Org B's rows (404, same as missing)
2. Lists only ever contain the caller's rows
3. Referencing another org's ingredient or employee id is rejected
4. Cross-tenant reference attempts are logged
"""

import logging

import pytest

from foodtrack.errors import Forbidden, ValidationError
from foodtrack.models import Employee, Ingredient
from foodtrack.services.tenant_service import require_ids_in_org, require_self, scoped_query


ENTITY_PAYLOADS = {
    '/api/employees': {'name': 'Kim', 'role': 'Packer'},
    '/api/ingredients': {'lotcode': 'L-1', 'name': 'Sugar', 'date': '2025-01-15'},
    '/api/recipes': {'lotcode': 'R-1', 'name': 'Cake', 'date_made': '2025-01-16'},
    '/api/batches': {
        'employee': 'Kim', 'recipe_lotcode': 'R-1', 'batch_lot_code': 'B-1',
        'date_made': '2025-01-17', 'amount_made': '20 loaves',
        'ingredients': [], 'amount_ingredients': [],
    },
    '/api/problemlogs': {
        'date_opened': '2025-01-18', 'customer_name': 'Pat', 'problem_type': 'Foreign object',
        'problem_description': 'Found a bolt',
    },
    '/api/receivinglogs': {
        'lotcode': 'RC-1', 'company_name': 'Dairy Ltd', 'item_name': 'Butter',
        'temperature': '5C', 'date': '2025-01-19',
    },
}


class TestTenantServiceHelpers:
    """Test tenant_service helper functions."""

    def test_require_self(self):
        require_self(1, 1)
        with pytest.raises(Forbidden):
            require_self(2, 1)

    def test_scoped_query_filters(self, db_session, org_a, org_b, employee_factory):
        a = employee_factory(org_a)
        employee_factory(org_b)

        rows = scoped_query(Employee, org_a.org_id).all()
        assert [r.id for r in rows] == [a['id']]

    def test_require_ids_in_org_valid(self, db_session, org_a, ingredient_factory):
        first = ingredient_factory(org_a, lotcode="A1")
        second = ingredient_factory(org_a, lotcode="A2")

        rows = require_ids_in_org(Ingredient, [second['id'], first['id']], org_a.org_id, "ingredient")
        assert [r.id for r in rows] == [second['id'], first['id']]

    def test_require_ids_in_org_cross_tenant(self, db_session, org_a, org_b, ingredient_factory):
        foreign = ingredient_factory(org_b)
        with pytest.raises(ValidationError) as exc:
            require_ids_in_org(Ingredient, [foreign['id']], org_a.org_id, "ingredient")
        assert str(foreign['id']) in exc.value.message

    def test_require_ids_in_org_nonexistent(self, db_session, org_a):
        with pytest.raises(ValidationError):
            require_ids_in_org(Ingredient, [99999], org_a.org_id, "ingredient")

    def test_cross_tenant_reference_is_logged(self, db_session, org_a, org_b, ingredient_factory, caplog):
        foreign = ingredient_factory(org_b)
        with caplog.at_level(logging.WARNING, logger="foodtrack.services.tenant_service"):
            with pytest.raises(ValidationError):
                require_ids_in_org(Ingredient, [foreign['id']], org_a.org_id, "ingredient")
        assert any("Tenant scope violation" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("path", sorted(ENTITY_PAYLOADS))
class TestEntityIsolation:

    def _create(self, client, tenant, path):
        resp = client.post(path, json=ENTITY_PAYLOADS[path], headers=tenant.headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    def test_list_only_own(self, client, db_session, org_a, org_b, path):
        mine = self._create(client, org_a, path)
        self._create(client, org_b, path)

        resp = client.get(path, headers=org_a.headers)
        assert resp.status_code == 200
        assert [e['id'] for e in resp.get_json()] == [mine['id']]
        assert all(e['org_id'] == org_a.org_id for e in resp.get_json())

    def test_get_foreign_is_404(self, client, db_session, org_a, org_b, path):
        theirs = self._create(client, org_b, path)
        resp = client.get(f"{path}/{theirs['id']}", headers=org_a.headers)
        assert resp.status_code == 404

    def test_update_foreign_is_404_and_unchanged(self, client, db_session, org_a, org_b, path):
        theirs = self._create(client, org_b, path)
        field = next(k for k, v in ENTITY_PAYLOADS[path].items() if isinstance(v, str) and 'date' not in k)

        resp = client.put(f"{path}/{theirs['id']}", json={field: 'changed'}, headers=org_a.headers)
        assert resp.status_code == 404

        resp = client.get(f"{path}/{theirs['id']}", headers=org_b.headers)
        assert resp.get_json() == theirs

    def test_delete_foreign_is_404_and_kept(self, client, db_session, org_a, org_b, path):
        theirs = self._create(client, org_b, path)
        resp = client.delete(f"{path}/{theirs['id']}", headers=org_a.headers)
        assert resp.status_code == 404
        assert client.get(f"{path}/{theirs['id']}", headers=org_b.headers).status_code == 200
