"""Add weekly meal selections

Revision ID: 8c4e51a2f6b3
Revises: 3b1f2c9d7a10
Create Date: 2025-07-08 10:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8c4e51a2f6b3'
down_revision = '3b1f2c9d7a10'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user_meal_selections',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('week_start_date', sa.Date(), nullable=False),
        sa.Column('selected_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'recipe_id', 'week_start_date',
                            name='uq_user_meal_selections_user_recipe_week'),
    )
    with op.batch_alter_table('user_meal_selections', schema=None) as batch_op:
        batch_op.create_index('ix_user_meal_selections_user_id', ['user_id'], unique=False)
        batch_op.create_index('ix_user_meal_selections_recipe_id', ['recipe_id'], unique=False)


def downgrade():
    with op.batch_alter_table('user_meal_selections', schema=None) as batch_op:
        batch_op.drop_index('ix_user_meal_selections_recipe_id')
        batch_op.drop_index('ix_user_meal_selections_user_id')

    op.drop_table('user_meal_selections')
