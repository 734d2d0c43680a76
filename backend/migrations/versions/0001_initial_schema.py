"""Initial schema: organizations, access tokens, production and quality records

Creates the tenant root (organizations), access_tokens for bearer-token
revocation, the production tables (employees, ingredients, recipes, batches)
with their association tables, and the quality tables (problem_logs,
receiving_logs).

Every tenant-owned table and every association table references its parent
with ON DELETE CASCADE, so deleting an organization removes all of its data.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-03-20
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _org_fk():
    return sa.Column(
        'org_id', sa.Integer(),
        sa.ForeignKey('organizations.id', ondelete='CASCADE'),
        nullable=False,
    )


def upgrade():
    op.create_table('organizations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('password_salt', sa.String(length=64), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organizations_email', 'organizations', ['email'], unique=True)

    op.create_table('access_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        _org_fk(),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_access_tokens_token_hash', 'access_tokens', ['token_hash'], unique=True)
    op.create_index('ix_access_tokens_org_id', 'access_tokens', ['org_id'])

    op.create_table('employees',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _org_fk(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_employees_org_id', 'employees', ['org_id'])

    op.create_table('ingredients',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _org_fk(),
        sa.Column('lotcode', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ingredients_org_id', 'ingredients', ['org_id'])

    op.create_table('recipes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _org_fk(),
        sa.Column('lotcode', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('date_made', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recipes_org_id', 'recipes', ['org_id'])

    op.create_table('recipe_ingredients',
        sa.Column('recipe_id', sa.Integer(), sa.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ingredient_id', sa.Integer(), sa.ForeignKey('ingredients.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('recipe_id', 'ingredient_id'),
    )

    op.create_table('batches',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _org_fk(),
        sa.Column('employee', sa.String(length=255), nullable=False),
        sa.Column('recipe_lotcode', sa.String(length=255), nullable=False),
        sa.Column('batch_lot_code', sa.String(length=255), nullable=False),
        sa.Column('date_made', sa.Date(), nullable=False),
        sa.Column('amount_made', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_batches_org_id', 'batches', ['org_id'])

    op.create_table('batch_ingredients',
        sa.Column('batch_id', sa.Integer(), sa.ForeignKey('batches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ingredient_id', sa.Integer(), sa.ForeignKey('ingredients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('batch_id', 'ingredient_id'),
    )

    op.create_table('problem_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _org_fk(),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('date_opened', sa.Date(), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('problem_type', sa.String(length=100), nullable=False),
        sa.Column('problem_description', sa.Text(), nullable=False),
        sa.Column('recall', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('date_resolved', sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_problem_logs_org_id', 'problem_logs', ['org_id'])

    op.create_table('problem_logs_employees',
        sa.Column('problem_log_id', sa.Integer(), sa.ForeignKey('problem_logs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('problem_log_id', 'employee_id'),
    )

    op.create_table('receiving_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _org_fk(),
        sa.Column('lotcode', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('temperature', sa.String(length=50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_receiving_logs_org_id', 'receiving_logs', ['org_id'])


def downgrade():
    op.drop_table('receiving_logs')
    op.drop_table('problem_logs_employees')
    op.drop_table('problem_logs')
    op.drop_table('batch_ingredients')
    op.drop_table('batches')
    op.drop_table('recipe_ingredients')
    op.drop_table('recipes')
    op.drop_table('ingredients')
    op.drop_table('employees')
    op.drop_table('access_tokens')
    op.drop_table('organizations')
