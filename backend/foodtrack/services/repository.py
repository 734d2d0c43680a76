# Overview: Generic tenant-scoped CRUD shared by every organization-owned entity.

"""
TenantRepository

One implementation of create / get / list / update / delete for every entity
that carries an org_id. Subclasses name the model, its validation policy and,
for entities with many-to-many associations, four hooks:

- extract_associations: pure shape checks on the client's id lists, before
  any query runs (e.g. batch array lengths)
- load_associations: fetch referenced rows, rejecting missing or
  cross-tenant ids
- replace_associations: delete-all then insert-all on the entity
- clear_associations: remove association rows before the entity is deleted

Writes run inside one unit_of_work, so a failure at any step leaves neither
the primary row nor any association row behind.

Cross-tenant reads are reported as NotFound, same as a missing id.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFound, StorageError
from ..extensions import db
from ..validation import ModelValidationPolicy, in_int_range, validate_payload
from .tenant_service import scoped_query
from .transaction import unit_of_work


class TenantRepository:
    model: Any = None
    label: str = "Entity"
    policy: ModelValidationPolicy = None  # type: ignore

    # Association hooks (no-ops for flat entities)

    def extract_associations(self, patch: dict, *, creating: bool) -> dict | None:
        return None

    def load_associations(self, refs: dict, org_id: int) -> Any:
        return refs

    def replace_associations(self, entity, loaded: Any) -> None:
        pass

    def clear_associations(self, entity) -> None:
        pass

    # Reads

    def list(self, org_id: int) -> list:
        try:
            return scoped_query(self.model, org_id).order_by(self.model.id).all()
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def get(self, entity_id: int, org_id: int):
        # No row can carry an id the column type cannot hold
        if not in_int_range(entity_id):
            raise NotFound.for_entity(self.label)
        try:
            entity = scoped_query(self.model, org_id).filter(self.model.id == entity_id).first()
        except SQLAlchemyError as exc:
            raise StorageError() from exc
        if entity is None:
            raise NotFound.for_entity(self.label)
        return entity

    # Writes

    def create(self, payload: dict, org_id: int):
        patch = validate_payload(model=self.model, payload=payload, policy=self.policy, partial=False)
        refs = self.extract_associations(patch, creating=True)

        with unit_of_work():
            loaded = self.load_associations(refs, org_id) if refs is not None else None
            entity = self.model(org_id=org_id, **patch)
            db.session.add(entity)
            db.session.flush()
            if loaded is not None:
                self.replace_associations(entity, loaded)
        return entity

    def update(self, entity_id: int, payload: dict, org_id: int):
        entity = self.get(entity_id, org_id)
        patch = validate_payload(model=self.model, payload=payload, policy=self.policy, partial=True)
        refs = self.extract_associations(patch, creating=False)

        with unit_of_work():
            loaded = self.load_associations(refs, org_id) if refs is not None else None
            for key, value in patch.items():
                setattr(entity, key, value)
            if loaded is not None:
                self.replace_associations(entity, loaded)
        return entity

    def delete(self, entity_id: int, org_id: int) -> None:
        entity = self.get(entity_id, org_id)
        with unit_of_work():
            self.clear_associations(entity)
            db.session.flush()
            db.session.delete(entity)
