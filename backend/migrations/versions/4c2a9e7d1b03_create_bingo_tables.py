"""create airline, bingo_room, room_player, card_cell and drawn_airline

Revision ID: 4c2a9e7d1b03
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b03'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'airline',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False, unique=True),
    )
    op.create_table(
        'bingo_room',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_code', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('admin_id', sa.String(length=128), nullable=False),
        sa.Column('use_free_center', sa.Boolean(), nullable=False),
        sa.Column('winner_id', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_bingo_room_room_code', 'bingo_room', ['room_code'], unique=True)
    op.create_table(
        'room_player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.Integer(), sa.ForeignKey('bingo_room.id'), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('display_name', sa.String(length=64), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.UniqueConstraint('room_id', 'user_id', name='uq_room_player_user'),
    )
    op.create_table(
        'card_cell',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('room_player.id'), nullable=False),
        sa.Column('row', sa.Integer(), nullable=False),
        sa.Column('col', sa.Integer(), nullable=False),
        sa.Column('airline_name', sa.String(length=128), nullable=False),
        sa.Column('is_free', sa.Boolean(), nullable=False),
    )
    op.create_table(
        'drawn_airline',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.Integer(), sa.ForeignKey('bingo_room.id'), nullable=False),
        sa.Column('airline_id', sa.Integer(), sa.ForeignKey('airline.id'), nullable=False),
        sa.Column('draw_order', sa.Integer(), nullable=False),
        sa.Column('drawn_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('room_id', 'draw_order', name='uq_drawn_airline_order'),
        sa.UniqueConstraint('room_id', 'airline_id', name='uq_drawn_airline_airline'),
    )


def downgrade():
    op.drop_table('drawn_airline')
    op.drop_table('card_cell')
    op.drop_table('room_player')
    op.drop_index('ix_bingo_room_room_code', table_name='bingo_room')
    op.drop_table('bingo_room')
    op.drop_table('airline')
