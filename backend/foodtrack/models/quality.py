from __future__ import annotations

from ..extensions import db
from ..time_utils import to_date_str


problem_logs_employees = db.Table(
    "problem_logs_employees",
    db.Column("problem_log_id", db.Integer, db.ForeignKey("problem_logs.id", ondelete="CASCADE"), primary_key=True),
    db.Column("employee_id", db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True),
)


class ProblemLog(db.Model):
    """
    Customer complaint / incident record.

    Open until date_resolved is filled in and is_open cleared. Employees
    assigned to the incident are linked through problem_logs_employees.
    """
    __tablename__ = "problem_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_open = db.Column(db.Boolean, nullable=False, default=True)
    date_opened = db.Column(db.Date, nullable=False)
    customer_name = db.Column(db.String(255), nullable=False)
    problem_type = db.Column(db.String(100), nullable=False)
    problem_description = db.Column(db.Text, nullable=False)
    recall = db.Column(db.Boolean, nullable=False, default=False)
    date_resolved = db.Column(db.Date, nullable=True)

    employees = db.relationship(
        "Employee",
        secondary=problem_logs_employees,
        lazy="selectin",
        order_by="Employee.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "is_open": self.is_open,
            "date_opened": to_date_str(self.date_opened),
            "customer_name": self.customer_name,
            "problem_type": self.problem_type,
            "problem_description": self.problem_description,
            "recall": self.recall,
            "date_resolved": to_date_str(self.date_resolved),
            "employees": sorted(e.id for e in self.employees),
        }


class ReceivingLog(db.Model):
    """Incoming delivery record: who delivered what, at which temperature."""
    __tablename__ = "receiving_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lotcode = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255), nullable=False)
    item_name = db.Column(db.String(255), nullable=False)
    temperature = db.Column(db.String(50), nullable=False)
    date = db.Column(db.Date, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "lotcode": self.lotcode,
            "company_name": self.company_name,
            "item_name": self.item_name,
            "temperature": self.temperature,
            "date": to_date_str(self.date),
        }
