"""add_connections_and_nudges

Revision ID: add_connections_and_nudges
Revises: create_challenge_schema
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'add_connections_and_nudges'
down_revision = 'create_challenge_schema'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('connection',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('receiver_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('user_low_id', sa.Integer(), nullable=False),
        sa.Column('user_high_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('requester_id <> receiver_id', name='connection_not_self'),
        sa.ForeignKeyConstraint(['requester_id'], ['user.id'], ),
        sa.ForeignKeyConstraint(['receiver_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_low_id', 'user_high_id', name='unique_connection_pair')
    )
    op.create_index('ix_connection_requester_id', 'connection', ['requester_id'], unique=False)
    op.create_index('ix_connection_receiver_id', 'connection', ['receiver_id'], unique=False)
    op.create_index('ix_connection_status', 'connection', ['status'], unique=False)

    op.create_table('nudge_event',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('nudge_type', sa.String(length=30), nullable=False),
        sa.Column('nudge_date', sa.Date(), nullable=False),
        sa.Column('action_taken', sa.Boolean(), nullable=False),
        sa.Column('acted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'nudge_date', name='unique_user_nudge_day')
    )
    op.create_index('ix_nudge_event_user_id', 'nudge_event', ['user_id'], unique=False)
    op.create_index('ix_nudge_event_nudge_type', 'nudge_event', ['nudge_type'], unique=False)


def downgrade():
    op.drop_table('nudge_event')
    op.drop_table('connection')
