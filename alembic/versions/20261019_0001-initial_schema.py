"""Initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RATING_FIELDS = (
    'prio_lane', 'strongside', 'weakside', 'engage',
    'peeling', 'split', 'hypercarry', 'controle',
)
DRAFT_SLOTS = tuple(
    f'{side}_{role}' for side in ('team', 'enemy') for role in ('top', 'jgl', 'mid', 'adc', 'sup')
)


def upgrade() -> None:
    """Create initial tables."""
    # Create champions table
    op.create_table(
        'champions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('roles', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create champion_evaluations table (one row per champion, ratings 0..3)
    op.create_table(
        'champion_evaluations',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('champion_id', sa.String(), nullable=False),
        *[sa.Column(f, sa.Integer(), nullable=False) for f in RATING_FIELDS],
        *[sa.CheckConstraint(f'{f} BETWEEN 0 AND 3', name=f'ck_eval_{f}') for f in RATING_FIELDS],
        sa.ForeignKeyConstraint(['champion_id'], ['champions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_champion_evaluations_champion_id', 'champion_evaluations', ['champion_id'], unique=True)

    # Create drafts table
    op.create_table(
        'drafts',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        *[sa.Column(f'{slot}_champion_id', sa.String(), nullable=True) for slot in DRAFT_SLOTS],
        sa.Column('team_bans', sa.JSON(), nullable=False),
        sa.Column('enemy_bans', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create draft_variants table
    op.create_table(
        'draft_variants',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('draft_id', sa.String(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('top_champion_id', sa.String(), nullable=True),
        sa.Column('jgl_champion_id', sa.String(), nullable=True),
        sa.Column('mid_champion_id', sa.String(), nullable=True),
        sa.Column('adc_champion_id', sa.String(), nullable=True),
        sa.Column('sup_champion_id', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['draft_id'], ['drafts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_draft_variants_draft_id', 'draft_variants', ['draft_id'])

    # Create scrims table
    op.create_table(
        'scrims',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('opponent', sa.Text(), nullable=False),
        sa.Column('is_win', sa.Boolean(), nullable=False),
        sa.Column('score', sa.Text(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=False),
        sa.Column('number_of_games', sa.Integer(), nullable=True),
        sa.Column('compositions', sa.JSON(), nullable=True),
        sa.Column('drafts', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_scrims_date', 'scrims', ['date'])

    # Create players table
    op.create_table(
        'players',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    # Create player_availability table
    op.create_table(
        'player_availability',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('player_id', sa.String(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_availability_day'),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('player_id', 'day_of_week', name='uq_availability_player_day')
    )
    op.create_index('ix_player_availability_player_id', 'player_availability', ['player_id'])

    # Create champion_synergies table
    op.create_table(
        'champion_synergies',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('champion1_id', sa.String(), nullable=False),
        sa.Column('champion2_id', sa.String(), nullable=False),
        sa.Column('synergy_type', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.CheckConstraint('rating BETWEEN 0 AND 3', name='ck_synergy_rating'),
        sa.ForeignKeyConstraint(['champion1_id'], ['champions.id']),
        sa.ForeignKeyConstraint(['champion2_id'], ['champions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_champion_synergies_champion1_id', 'champion_synergies', ['champion1_id'])
    op.create_index('ix_champion_synergies_champion2_id', 'champion_synergies', ['champion2_id'])

    # Create patch_notes table
    op.create_table(
        'patch_notes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('version', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_patch_notes_created_at', 'patch_notes', ['created_at'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_patch_notes_created_at', 'patch_notes')
    op.drop_table('patch_notes')
    op.drop_index('ix_champion_synergies_champion2_id', 'champion_synergies')
    op.drop_index('ix_champion_synergies_champion1_id', 'champion_synergies')
    op.drop_table('champion_synergies')
    op.drop_index('ix_player_availability_player_id', 'player_availability')
    op.drop_table('player_availability')
    op.drop_table('players')
    op.drop_index('ix_scrims_date', 'scrims')
    op.drop_table('scrims')
    op.drop_index('ix_draft_variants_draft_id', 'draft_variants')
    op.drop_table('draft_variants')
    op.drop_table('drafts')
    op.drop_index('ix_champion_evaluations_champion_id', 'champion_evaluations')
    op.drop_table('champion_evaluations')
    op.drop_table('champions')
