"""Initial meal planner schema

Revision ID: 3b1f2c9d7a10
Revises:
Create Date: 2025-07-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f2c9d7a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('subscription_status', sa.String(length=20), nullable=False, server_default='trial'),
        sa.Column('subscription_plan', sa.String(length=20), nullable=False, server_default='trial'),
        sa.Column('meal_credits', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('total_meals_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cuisine', sa.String(length=50), nullable=True),
        sa.Column('protein', sa.String(length=50), nullable=True),
        sa.Column('cooking_time', sa.Integer(), nullable=True),
        sa.Column('rating', sa.Numeric(precision=2, scale=1), nullable=True),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('source_url', sa.String(length=500), nullable=True),
        sa.Column('owner_user_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['owner_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('recipes', schema=None) as batch_op:
        batch_op.create_index('ix_recipes_title', ['title'], unique=False)
        batch_op.create_index('ix_recipes_cuisine', ['cuisine'], unique=False)
        batch_op.create_index('ix_recipes_protein', ['protein'], unique=False)
        batch_op.create_index('ix_recipes_owner_user_id', ['owner_user_id'], unique=False)

    op.create_table(
        'user_preferences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('protein_preferences', sa.JSON(), nullable=False),
        sa.Column('cuisine_preferences', sa.JSON(), nullable=False),
        sa.Column('dietary_restrictions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'user_favorites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'recipe_id', name='uq_user_favorites_user_recipe'),
    )
    with op.batch_alter_table('user_favorites', schema=None) as batch_op:
        batch_op.create_index('ix_user_favorites_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_user_favorites_recipe_id', ['recipe_id'], unique=False)

    op.create_table(
        'meal_calendar',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('meal_type', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'scheduled_date', 'meal_type',
                            name='uq_meal_calendar_user_date_slot'),
    )
    with op.batch_alter_table('meal_calendar', schema=None) as batch_op:
        batch_op.create_index('ix_meal_calendar_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_meal_calendar_recipe_id', ['recipe_id'], unique=False)
        batch_op.create_index('ix_meal_calendar_scheduled_date', ['scheduled_date'], unique=False)

    op.create_table(
        'grocery_lists',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('week_start_date', sa.Date(), nullable=False),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'week_start_date', name='uq_grocery_lists_user_week'),
    )
    with op.batch_alter_table('grocery_lists', schema=None) as batch_op:
        batch_op.create_index('ix_grocery_lists_user_id', ['user_id'], unique=False)


def downgrade():
    op.drop_table('grocery_lists')
    op.drop_table('meal_calendar')
    op.drop_table('user_favorites')
    op.drop_table('user_preferences')
    op.drop_table('recipes')
    op.drop_table('users')
