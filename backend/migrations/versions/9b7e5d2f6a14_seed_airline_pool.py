"""seed the default airline pool

Revision ID: 9b7e5d2f6a14
Revises: 4c2a9e7d1b03
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa

from bingo.models import DEFAULT_AIRLINES


# revision identifiers, used by Alembic.
revision = '9b7e5d2f6a14'
down_revision = '4c2a9e7d1b03'
branch_labels = None
depends_on = None


airline_table = sa.table(
    'airline',
    sa.column('id', sa.Integer),
    sa.column('name', sa.String),
)


def upgrade():
    op.bulk_insert(airline_table, [{'name': name} for name in DEFAULT_AIRLINES])


def downgrade():
    op.execute(airline_table.delete().where(airline_table.c.name.in_(DEFAULT_AIRLINES)))
