"""create leaderboard table

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # Tables may already exist when the app created them on startup
    if 'leaderboard' in set(insp.get_table_names()):
        return

    op.create_table(
        'leaderboard',
        sa.Column('identity', sa.String(length=128), primary_key=True),
        sa.Column('display_name', sa.String(length=64), nullable=False),
        sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('losses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'leaderboard' in set(insp.get_table_names()):
        op.drop_table('leaderboard')
