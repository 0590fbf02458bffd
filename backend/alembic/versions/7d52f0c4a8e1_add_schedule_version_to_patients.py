"""add schedule_version to patients

Revision ID: 7d52f0c4a8e1
Revises: 3a7c1e9b2d40
Create Date: 2026-10-26 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7d52f0c4a8e1'
down_revision: Union[str, None] = '3a7c1e9b2d40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    columns = [c['name'] for c in inspector.get_columns('patients')]

    if 'schedule_version' not in columns:
        op.add_column(
            'patients',
            sa.Column('schedule_version', sa.Integer(), nullable=False, server_default='0'),
        )


def downgrade() -> None:
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    columns = [c['name'] for c in inspector.get_columns('patients')]

    if 'schedule_version' in columns:
        with op.batch_alter_table('patients') as batch_op:
            batch_op.drop_column('schedule_version')
