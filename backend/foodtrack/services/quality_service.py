# Overview: Service-layer operations for problem logs and receiving logs.

from __future__ import annotations

from ..extensions import db
from ..models import Employee, ProblemLog, ReceivingLog
from ..validation import ModelValidationPolicy, coerce_id_list
from .repository import TenantRepository
from .tenant_service import require_ids_in_org


class ProblemLogRepository(TenantRepository):
    """
    Incidents with a set of assigned employees (problem_logs_employees).

    Assigned employees must belong to the same organization as the log.
    """
    model = ProblemLog
    label = "Problem log"
    policy = ModelValidationPolicy(
        writable_fields=frozenset({
            "is_open", "date_opened", "customer_name", "problem_type",
            "problem_description", "recall", "date_resolved",
        }),
        required_on_create=frozenset({
            "date_opened", "customer_name", "problem_type", "problem_description",
        }),
        list_fields=frozenset({"employees"}),
    )

    def extract_associations(self, patch, *, creating):
        if "employees" not in patch:
            return {"employees": []} if creating else None
        return {"employees": coerce_id_list("employees", patch.pop("employees"))}

    def load_associations(self, refs, org_id):
        return require_ids_in_org(Employee, refs["employees"], org_id, "employee")

    def replace_associations(self, entity, loaded):
        entity.employees.clear()
        db.session.flush()
        entity.employees.extend(loaded)

    def clear_associations(self, entity):
        entity.employees.clear()


class ReceivingLogRepository(TenantRepository):
    model = ReceivingLog
    label = "Receiving log"
    policy = ModelValidationPolicy(
        writable_fields=frozenset({"lotcode", "company_name", "item_name", "temperature", "date"}),
        required_on_create=frozenset({"lotcode", "company_name", "item_name", "temperature", "date"}),
    )


problem_logs = ProblemLogRepository()
receiving_logs = ReceivingLogRepository()
