from __future__ import annotations

from ..extensions import db
from ..time_utils import to_date_str


def _org_fk():
    return db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class Employee(db.Model):
    __tablename__ = "employees"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = _org_fk()
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(255), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "role": self.role,
        }


class Ingredient(db.Model):
    """A received or produced ingredient lot."""
    __tablename__ = "ingredients"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = _org_fk()
    lotcode = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    date = db.Column(db.Date, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "lotcode": self.lotcode,
            "name": self.name,
            "date": to_date_str(self.date),
        }


recipe_ingredients = db.Table(
    "recipe_ingredients",
    db.Column("recipe_id", db.Integer, db.ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True),
    db.Column("ingredient_id", db.Integer, db.ForeignKey("ingredients.id", ondelete="CASCADE"), primary_key=True),
)


class Recipe(db.Model):
    """
    A recipe lot and the ingredient lots that went into it.

    Ingredients are linked through recipe_ingredients and must belong to the
    same organization as the recipe.
    """
    __tablename__ = "recipes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = _org_fk()
    lotcode = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    date_made = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=True)

    ingredients = db.relationship(
        "Ingredient",
        secondary=recipe_ingredients,
        lazy="selectin",
        order_by="Ingredient.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "lotcode": self.lotcode,
            "name": self.name,
            "date_made": to_date_str(self.date_made),
            "description": self.description,
            "ingredients": sorted(i.id for i in self.ingredients),
        }


class BatchIngredient(db.Model):
    """Association row: how much of one ingredient lot went into a batch."""
    __tablename__ = "batch_ingredients"

    batch_id = db.Column(db.Integer, db.ForeignKey("batches.id", ondelete="CASCADE"), primary_key=True)
    ingredient_id = db.Column(db.Integer, db.ForeignKey("ingredients.id", ondelete="CASCADE"), primary_key=True)
    amount = db.Column(db.Integer, nullable=False)


class Batch(db.Model):
    """
    A production batch.

    employee and recipe_lotcode are free text, not foreign keys. Ingredient
    usage is stored as (ingredient, amount) pairs and exposed as two parallel
    arrays, `ingredients` and `amount_ingredients`.
    """
    __tablename__ = "batches"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = _org_fk()
    employee = db.Column(db.String(255), nullable=False)
    recipe_lotcode = db.Column(db.String(255), nullable=False)
    batch_lot_code = db.Column(db.String(255), nullable=False)
    date_made = db.Column(db.Date, nullable=False)
    amount_made = db.Column(db.String(255), nullable=False)

    items = db.relationship(
        "BatchIngredient",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="BatchIngredient.ingredient_id",
    )

    def to_dict(self) -> dict:
        items = sorted(self.items, key=lambda item: item.ingredient_id)
        return {
            "id": self.id,
            "org_id": self.org_id,
            "employee": self.employee,
            "recipe_lotcode": self.recipe_lotcode,
            "batch_lot_code": self.batch_lot_code,
            "date_made": to_date_str(self.date_made),
            "amount_made": self.amount_made,
            "ingredients": [item.ingredient_id for item in items],
            "amount_ingredients": [item.amount for item in items],
        }
