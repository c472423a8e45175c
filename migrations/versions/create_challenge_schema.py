"""create_challenge_schema

Revision ID: create_challenge_schema
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_challenge_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=80), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_ranking_private', sa.Boolean(), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_external_id', 'user', ['external_id'], unique=True)
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table('user_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total_xp', sa.Integer(), nullable=False),
        sa.Column('current_level', sa.String(length=20), nullable=False),
        sa.Column('power_tokens', sa.Integer(), nullable=False),
        sa.Column('streak_rescues_available', sa.Integer(), nullable=False),
        sa.Column('streak_rescues_used', sa.Integer(), nullable=False),
        sa.Column('shield_used_at', sa.Date(), nullable=True),
        sa.Column('shield_pending', sa.Boolean(), nullable=False),
        sa.Column('wager_active', sa.Boolean(), nullable=False),
        sa.Column('wager_amount', sa.Integer(), nullable=False),
        sa.Column('wager_placed_on', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('total_xp >= 0', name='total_xp_non_negative'),
        sa.CheckConstraint('power_tokens >= 0', name='power_tokens_non_negative'),
        sa.CheckConstraint('streak_rescues_available >= 0', name='rescues_non_negative'),
        sa.CheckConstraint('wager_amount >= 0', name='wager_amount_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_user_progress_user_id', 'user_progress', ['user_id'], unique=True)

    op.create_table('streak_state',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('current_streak', sa.Integer(), nullable=False),
        sa.Column('longest_streak', sa.Integer(), nullable=False),
        sa.Column('last_check_in_date', sa.Date(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('current_streak >= 0', name='current_streak_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_streak_state_user_id', 'streak_state', ['user_id'], unique=True)

    op.create_table('mission_completion',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('mission_id', sa.String(length=32), nullable=False),
        sa.Column('mission_type', sa.String(length=20), nullable=False),
        sa.Column('mission_date', sa.Date(), nullable=False),
        sa.Column('xp_earned', sa.Integer(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'mission_id', 'mission_date', name='unique_user_mission_day')
    )
    op.create_index('ix_mission_completion_user_id', 'mission_completion', ['user_id'], unique=False)
    op.create_index('ix_mission_completion_mission_type', 'mission_completion', ['mission_type'], unique=False)
    op.create_index('ix_mission_completion_mission_date', 'mission_completion', ['mission_date'], unique=False)
    op.create_index('idx_completion_user_date', 'mission_completion', ['user_id', 'mission_date'], unique=False)

    op.create_table('perfect_day_bonus',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('bonus_date', sa.Date(), nullable=False),
        sa.Column('xp_awarded', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'bonus_date', name='unique_user_perfect_day')
    )
    op.create_index('ix_perfect_day_bonus_user_id', 'perfect_day_bonus', ['user_id'], unique=False)

    op.create_table('daily_victory',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('victory_text', sa.String(length=500), nullable=False),
        sa.Column('victory_date', sa.Date(), nullable=False),
        sa.Column('xp_bonus', sa.Integer(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'victory_date', name='unique_user_victory_day')
    )
    op.create_index('ix_daily_victory_user_id', 'daily_victory', ['user_id'], unique=False)
    op.create_index('ix_daily_victory_victory_date', 'daily_victory', ['victory_date'], unique=False)

    op.create_table('user_achievement',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('achievement_id', sa.String(length=32), nullable=False),
        sa.Column('unlocked_at', sa.DateTime(), nullable=False),
        sa.Column('tokens_awarded', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'achievement_id', name='unique_user_achievement')
    )
    op.create_index('ix_user_achievement_user_id', 'user_achievement', ['user_id'], unique=False)

    op.create_table('league',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(length=10), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('is_closed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_league_tier_week', 'league', ['tier', 'week_start'], unique=False)

    op.create_table('league_member',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('league_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('xp_earned_this_week', sa.Integer(), nullable=False),
        sa.Column('final_position', sa.Integer(), nullable=True),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('xp_earned_this_week >= 0', name='weekly_xp_non_negative'),
        sa.ForeignKeyConstraint(['league_id'], ['league.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'week_start', name='unique_user_league_week')
    )
    op.create_index('ix_league_member_league_id', 'league_member', ['league_id'], unique=False)
    op.create_index('ix_league_member_user_id', 'league_member', ['user_id'], unique=False)

    op.create_table('journal_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('entry_type', sa.String(length=20), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('mood_score', sa.Integer(), nullable=True),
        sa.Column('energy_score', sa.Integer(), nullable=True),
        sa.Column('stress_score', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=True),
        sa.Column('text', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_journal_entry_user_id', 'journal_entry', ['user_id'], unique=False)
    op.create_index('ix_journal_entry_entry_type', 'journal_entry', ['entry_type'], unique=False)
    op.create_index('ix_journal_entry_entry_date', 'journal_entry', ['entry_date'], unique=False)


def downgrade():
    op.drop_table('journal_entry')
    op.drop_table('league_member')
    op.drop_table('league')
    op.drop_table('user_achievement')
    op.drop_table('daily_victory')
    op.drop_table('perfect_day_bonus')
    op.drop_table('mission_completion')
    op.drop_table('streak_state')
    op.drop_table('user_progress')
    op.drop_table('user')
