"""initial bowling club schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2025-09-01 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('profile_image_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'bowling_center',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('lane_count', sa.Integer(), nullable=True),
        sa.Column('parking_available', sa.Boolean(), nullable=False),
    )

    op.create_table(
        'club',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('bowling_center_id', sa.Integer(), sa.ForeignKey('bowling_center.id'), nullable=True),
        sa.Column('club_fee', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_club_name', 'club', ['name'])

    op.create_table(
        'club_member',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('club_id', sa.Integer(), sa.ForeignKey('club.id'), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('joined_date', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'club_id', name='uq_club_member_user_club'),
    )
    op.create_index('ix_club_member_user_id', 'club_member', ['user_id'])
    op.create_index('ix_club_member_club_id', 'club_member', ['club_id'])

    op.create_table(
        'game',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('club_id', sa.Integer(), sa.ForeignKey('club.id'), nullable=False),
        sa.Column('bowling_center_id', sa.Integer(), sa.ForeignKey('bowling_center.id'), nullable=False),
        sa.Column('game_date', sa.DateTime(), nullable=False),
        sa.Column('game_type', sa.String(length=16), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_game_club_id', 'game', ['club_id'])
    op.create_index('ix_game_game_date', 'game', ['game_date'])

    op.create_table(
        'game_score',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('game_order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('score >= 0 AND score <= 300', name='ck_game_score_range'),
        sa.CheckConstraint('game_order >= 1', name='ck_game_score_order'),
    )
    op.create_index('ix_game_score_game_id', 'game_score', ['game_id'])
    op.create_index('ix_game_score_user_id', 'game_score', ['user_id'])
    op.create_index('ix_game_score_created_at', 'game_score', ['created_at'])


def downgrade():
    op.drop_table('game_score')
    op.drop_table('game')
    op.drop_table('club_member')
    op.drop_table('club')
    op.drop_table('bowling_center')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
