# Overview: Pytest coverage for recipes and batches and their ingredient associations.

import logging

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from foodtrack.extensions import db
from foodtrack.models import Batch, BatchIngredient, Recipe, recipe_ingredients


def _recipe(ingredients=None, **overrides):
    payload = {'lotcode': 'R-100', 'name': 'Sourdough', 'date_made': '2025-03-05'}
    if ingredients is not None:
        payload['ingredients'] = ingredients
    payload.update(overrides)
    return payload


def _batch(ingredients, amounts, **overrides):
    payload = {
        'employee': 'Jo Baker',
        'recipe_lotcode': 'R-100',
        'batch_lot_code': 'B-100',
        'date_made': '2025-03-06',
        'amount_made': '40 loaves',
        'ingredients': ingredients,
        'amount_ingredients': amounts,
    }
    payload.update(overrides)
    return payload


def _recipe_link_count(db_session):
    return len(db_session.execute(recipe_ingredients.select()).fetchall())


class TestRecipes:

    def test_create_with_ingredients(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a, lotcode="L1")
        i2 = ingredient_factory(org_a, lotcode="L2")

        resp = client.post('/api/recipes', json=_recipe([i2['id'], i1['id']]), headers=org_a.headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body['ingredients'] == sorted([i1['id'], i2['id']])
        assert body['description'] is None

        resp = client.get(f"/api/recipes/{body['id']}", headers=org_a.headers)
        assert resp.get_json() == body

    def test_create_without_ingredients(self, client, db_session, org_a):
        resp = client.post('/api/recipes', json=_recipe(description='Long ferment'), headers=org_a.headers)
        assert resp.status_code == 201
        assert resp.get_json()['ingredients'] == []
        assert resp.get_json()['description'] == 'Long ferment'

    def test_foreign_ingredient_persists_nothing(self, client, db_session, org_a, org_b, ingredient_factory):
        mine = ingredient_factory(org_a)
        theirs = ingredient_factory(org_b)

        resp = client.post('/api/recipes', json=_recipe([mine['id'], theirs['id']]), headers=org_a.headers)
        assert resp.status_code == 400
        assert db_session.query(Recipe).count() == 0
        assert _recipe_link_count(db_session) == 0

    def test_duplicate_ids_rejected(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        resp = client.post('/api/recipes', json=_recipe([i1['id'], i1['id']]), headers=org_a.headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize("bad", ["1,2", [True], ["1"], [1.5], {"id": 1}])
    def test_malformed_ingredient_list(self, client, db_session, org_a, bad):
        resp = client.post('/api/recipes', json=_recipe(bad), headers=org_a.headers)
        assert resp.status_code == 400
        assert db_session.query(Recipe).count() == 0

    def test_update_replaces_ingredient_set(self, client, db_session, org_a, ingredient_factory):
        i1, i2, i3 = (ingredient_factory(org_a, lotcode=f"L{n}") for n in range(3))
        created = client.post('/api/recipes', json=_recipe([i1['id'], i2['id']]),
                              headers=org_a.headers).get_json()

        resp = client.put(f"/api/recipes/{created['id']}", json={'ingredients': [i3['id']]},
                          headers=org_a.headers)
        assert resp.status_code == 200
        assert resp.get_json()['ingredients'] == [i3['id']]
        assert _recipe_link_count(db_session) == 1

    def test_update_without_list_keeps_ingredients(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        created = client.post('/api/recipes', json=_recipe([i1['id']]), headers=org_a.headers).get_json()

        resp = client.put(f"/api/recipes/{created['id']}", json={'name': 'Rye'}, headers=org_a.headers)
        assert resp.get_json()['name'] == 'Rye'
        assert resp.get_json()['ingredients'] == [i1['id']]

    def test_update_with_empty_list_clears(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        created = client.post('/api/recipes', json=_recipe([i1['id']]), headers=org_a.headers).get_json()

        resp = client.put(f"/api/recipes/{created['id']}", json={'ingredients': []}, headers=org_a.headers)
        assert resp.get_json()['ingredients'] == []

    def test_failed_update_keeps_previous_state(self, client, db_session, org_a, org_b, ingredient_factory):
        i1 = ingredient_factory(org_a)
        theirs = ingredient_factory(org_b)
        created = client.post('/api/recipes', json=_recipe([i1['id']]), headers=org_a.headers).get_json()

        resp = client.put(f"/api/recipes/{created['id']}",
                          json={'name': 'Changed', 'ingredients': [theirs['id']]},
                          headers=org_a.headers)
        assert resp.status_code == 400

        resp = client.get(f"/api/recipes/{created['id']}", headers=org_a.headers)
        assert resp.get_json() == created

    def test_delete_removes_links(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        created = client.post('/api/recipes', json=_recipe([i1['id']]), headers=org_a.headers).get_json()

        assert client.delete(f"/api/recipes/{created['id']}", headers=org_a.headers).status_code == 204
        assert _recipe_link_count(db_session) == 0
        assert client.get(f"/api/ingredients/{i1['id']}", headers=org_a.headers).status_code == 200


class TestBatches:

    def test_create_round_trip(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a, lotcode="L1")
        i2 = ingredient_factory(org_a, lotcode="L2")

        resp = client.post('/api/batches', json=_batch([i2['id'], i1['id']], [7, 3]), headers=org_a.headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body['ingredients'] == [i1['id'], i2['id']]
        assert body['amount_ingredients'] == [3, 7]
        assert body['batch_lot_code'] == 'B-100'

        assert client.get(f"/api/batches/{body['id']}", headers=org_a.headers).get_json() == body

    def test_batch_lot_code_alias(self, client, db_session, org_a):
        payload = _batch([], [])
        payload['batchLotCode'] = payload.pop('batch_lot_code')

        resp = client.post('/api/batches', json=payload, headers=org_a.headers)
        assert resp.status_code == 201
        assert resp.get_json()['batch_lot_code'] == 'B-100'

    def test_length_mismatch_persists_nothing(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a, lotcode="L1")
        i2 = ingredient_factory(org_a, lotcode="L2")

        resp = client.post('/api/batches', json=_batch([i1['id'], i2['id']], [5]), headers=org_a.headers)
        assert resp.status_code == 400
        assert 'same length' in resp.get_json()['error']
        assert db_session.query(Batch).count() == 0
        assert db_session.query(BatchIngredient).count() == 0

    def test_lists_required_on_create(self, client, db_session, org_a):
        payload = _batch([], [])
        del payload['amount_ingredients']
        resp = client.post('/api/batches', json=payload, headers=org_a.headers)
        assert resp.status_code == 400

    def test_foreign_ingredient_persists_nothing(self, client, db_session, org_a, org_b, ingredient_factory):
        theirs = ingredient_factory(org_b)
        resp = client.post('/api/batches', json=_batch([theirs['id']], [1]), headers=org_a.headers)
        assert resp.status_code == 400
        assert db_session.query(Batch).count() == 0

    def test_amounts_must_be_integers(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        resp = client.post('/api/batches', json=_batch([i1['id']], ["5"]), headers=org_a.headers)
        assert resp.status_code == 400

    def test_update_replaces_pairs(self, client, db_session, org_a, ingredient_factory):
        i1, i2, i3 = (ingredient_factory(org_a, lotcode=f"L{n}") for n in range(3))
        created = client.post('/api/batches', json=_batch([i1['id'], i2['id']], [1, 2]),
                              headers=org_a.headers).get_json()

        resp = client.put(f"/api/batches/{created['id']}",
                          json={'ingredients': [i3['id']], 'amount_ingredients': [9]},
                          headers=org_a.headers)
        assert resp.status_code == 200
        assert resp.get_json()['ingredients'] == [i3['id']]
        assert resp.get_json()['amount_ingredients'] == [9]
        assert db_session.query(BatchIngredient).count() == 1

    def test_update_one_list_only_rejected(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        created = client.post('/api/batches', json=_batch([i1['id']], [1]), headers=org_a.headers).get_json()

        resp = client.put(f"/api/batches/{created['id']}", json={'amount_ingredients': [4]},
                          headers=org_a.headers)
        assert resp.status_code == 400
        assert client.get(f"/api/batches/{created['id']}", headers=org_a.headers).get_json() == created

    def test_update_scalar_keeps_pairs(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        created = client.post('/api/batches', json=_batch([i1['id']], [6]), headers=org_a.headers).get_json()

        resp = client.put(f"/api/batches/{created['id']}", json={'amount_made': '38 loaves'},
                          headers=org_a.headers)
        assert resp.get_json() == {**created, 'amount_made': '38 loaves'}

    def test_deleting_ingredient_drops_batch_pair(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a, lotcode="L1")
        i2 = ingredient_factory(org_a, lotcode="L2")
        created = client.post('/api/batches', json=_batch([i1['id'], i2['id']], [1, 2]),
                              headers=org_a.headers).get_json()

        assert client.delete(f"/api/ingredients/{i1['id']}", headers=org_a.headers).status_code == 204

        resp = client.get(f"/api/batches/{created['id']}", headers=org_a.headers)
        assert resp.get_json()['ingredients'] == [i2['id']]
        assert resp.get_json()['amount_ingredients'] == [2]

    def test_delete_batch(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        created = client.post('/api/batches', json=_batch([i1['id']], [1]), headers=org_a.headers).get_json()

        assert client.delete(f"/api/batches/{created['id']}", headers=org_a.headers).status_code == 204
        assert db_session.query(BatchIngredient).count() == 0
        assert client.get(f"/api/batches/{created['id']}", headers=org_a.headers).status_code == 404


class TestOutOfRangeValues:

    def test_oversized_ingredient_id(self, client, db_session, org_a):
        resp = client.post('/api/recipes', json=_recipe([2 ** 70]), headers=org_a.headers)
        assert resp.status_code == 400
        assert db_session.query(Recipe).count() == 0

    def test_oversized_amount(self, client, db_session, org_a, ingredient_factory):
        i1 = ingredient_factory(org_a)
        resp = client.post('/api/batches', json=_batch([i1['id']], [2 ** 70]), headers=org_a.headers)
        assert resp.status_code == 400
        assert db_session.query(Batch).count() == 0

    def test_oversized_path_id(self, client, db_session, org_a):
        resp = client.get(f'/api/recipes/{2 ** 70}', headers=org_a.headers)
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Recipe not found'}


def _fail(exc):
    def _raise(*args, **kwargs):
        raise exc
    return _raise


class TestStorageFailures:
    """A database error inside a write rolls everything back and reports 500."""

    @pytest.mark.parametrize("exc", [
        OperationalError("INSERT INTO recipes", {}, Exception("disk I/O error")),
        IntegrityError("INSERT INTO recipes", {}, Exception("constraint failed")),
    ])
    def test_flush_failure_persists_nothing(self, client, db_session, org_a, ingredient_factory,
                                            monkeypatch, exc):
        i1 = ingredient_factory(org_a)
        monkeypatch.setattr(db.session, "flush", _fail(exc))

        resp = client.post('/api/recipes', json=_recipe([i1['id']]), headers=org_a.headers)
        monkeypatch.undo()

        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Database error'}
        assert db_session.query(Recipe).count() == 0
        assert _recipe_link_count(db_session) == 0

    def test_failed_rollback_is_logged_not_reported(self, client, db_session, org_a, monkeypatch, caplog):
        monkeypatch.setattr(db.session, "flush", _fail(OperationalError("INSERT", {}, Exception("gone"))))
        monkeypatch.setattr(db.session, "rollback", _fail(OperationalError("ROLLBACK", {}, Exception("gone"))))

        with caplog.at_level(logging.ERROR, logger="foodtrack.services.transaction"):
            resp = client.post('/api/recipes', json=_recipe(), headers=org_a.headers)
        monkeypatch.undo()
        db_session.rollback()

        assert resp.status_code == 500
        assert resp.get_json() == {'error': 'Database error'}
        assert any("Rollback failed" in r.getMessage() for r in caplog.records)
        assert db_session.query(Recipe).count() == 0
