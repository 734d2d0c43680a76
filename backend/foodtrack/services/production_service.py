# Overview: Service-layer operations for employees, ingredients, recipes and batches.

"""
Production Repositories

Employees and ingredients are flat tenant-owned rows. Recipes and batches
reference ingredient lots through association tables:

- recipe_ingredients: set of ingredient ids
- batch_ingredients: (ingredient id, amount) pairs, exposed to clients as the
  parallel arrays `ingredients` and `amount_ingredients`

Every referenced ingredient must belong to the caller's organization. A
missing or foreign id aborts the whole create/update. Updating an id list
replaces the stored set entirely; it is never merged.
"""

from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import Batch, BatchIngredient, Employee, Ingredient, Recipe
from ..validation import ModelValidationPolicy, coerce_id_list, coerce_int_list
from .repository import TenantRepository
from .tenant_service import require_ids_in_org


class EmployeeRepository(TenantRepository):
    model = Employee
    label = "Employee"
    policy = ModelValidationPolicy(
        writable_fields=frozenset({"name", "role"}),
        required_on_create=frozenset({"name", "role"}),
    )


class IngredientRepository(TenantRepository):
    model = Ingredient
    label = "Ingredient"
    policy = ModelValidationPolicy(
        writable_fields=frozenset({"lotcode", "name", "date"}),
        required_on_create=frozenset({"lotcode", "name", "date"}),
    )


class RecipeRepository(TenantRepository):
    model = Recipe
    label = "Recipe"
    policy = ModelValidationPolicy(
        writable_fields=frozenset({"lotcode", "name", "date_made", "description"}),
        required_on_create=frozenset({"lotcode", "name", "date_made"}),
        list_fields=frozenset({"ingredients"}),
    )

    def extract_associations(self, patch, *, creating):
        if "ingredients" not in patch:
            return {"ingredients": []} if creating else None
        return {"ingredients": coerce_id_list("ingredients", patch.pop("ingredients"))}

    def load_associations(self, refs, org_id):
        return require_ids_in_org(Ingredient, refs["ingredients"], org_id, "ingredient")

    def replace_associations(self, entity, loaded):
        entity.ingredients.clear()
        db.session.flush()
        entity.ingredients.extend(loaded)

    def clear_associations(self, entity):
        entity.ingredients.clear()


class BatchRepository(TenantRepository):
    model = Batch
    label = "Batch"
    policy = ModelValidationPolicy(
        writable_fields=frozenset({
            "employee", "recipe_lotcode", "batch_lot_code", "date_made", "amount_made",
        }),
        required_on_create=frozenset({
            "employee", "recipe_lotcode", "batch_lot_code", "date_made", "amount_made",
            "ingredients", "amount_ingredients",
        }),
        aliases={"batchLotCode": "batch_lot_code"},
        list_fields=frozenset({"ingredients", "amount_ingredients"}),
    )

    def extract_associations(self, patch, *, creating):
        has_ids = "ingredients" in patch
        has_amounts = "amount_ingredients" in patch
        if not has_ids and not has_amounts and not creating:
            return None
        if has_ids != has_amounts:
            raise ValidationError("ingredients and amount_ingredients must be provided together")

        ids = coerce_id_list("ingredients", patch.pop("ingredients"))
        amounts = coerce_int_list("amount_ingredients", patch.pop("amount_ingredients"))
        if len(ids) != len(amounts):
            raise ValidationError(
                "ingredients and amount_ingredients must have the same length "
                f"({len(ids)} != {len(amounts)})"
            )
        return {"ingredients": ids, "amount_ingredients": amounts}

    def load_associations(self, refs, org_id):
        ingredients = require_ids_in_org(Ingredient, refs["ingredients"], org_id, "ingredient")
        return list(zip(ingredients, refs["amount_ingredients"]))

    def replace_associations(self, entity, loaded):
        entity.items.clear()
        db.session.flush()
        entity.items.extend(
            BatchIngredient(ingredient_id=ingredient.id, amount=amount)
            for ingredient, amount in loaded
        )

    def clear_associations(self, entity):
        entity.items.clear()


employees = EmployeeRepository()
ingredients = IngredientRepository()
recipes = RecipeRepository()
batches = BatchRepository()
