"""create teams, scores and login tables

Revision ID: 5c2d9e1a7b30
Revises:
Create Date: 2025-11-02 10:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e1a7b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'teams' not in existing_tables:
        op.create_table(
            'teams',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )

    if 'scores' not in existing_tables:
        op.create_table(
            'scores',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('game_name', sa.String(length=32), nullable=False),
            sa.Column('team_id', sa.Integer(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.ForeignKeyConstraint(['team_id'], ['teams.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_scores_game_name', 'scores', ['game_name'])
        op.create_index('ix_scores_team_id', 'scores', ['team_id'])

    if 'login' not in existing_tables:
        op.create_table(
            'login',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('code_hash', sa.String(length=128), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )


def downgrade():
    op.drop_table('login')
    op.drop_index('ix_scores_team_id', table_name='scores')
    op.drop_index('ix_scores_game_name', table_name='scores')
    op.drop_table('scores')
    op.drop_table('teams')
