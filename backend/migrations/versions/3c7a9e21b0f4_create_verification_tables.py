"""create player_stats, verification_codes, users, profiles, player_sessions

Revision ID: 3c7a9e21b0f4
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c7a9e21b0f4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # player_stats may already exist when the score service shares the database
    existing_tables = set(insp.get_table_names())

    if 'player_stats' not in existing_tables:
        op.create_table(
            'player_stats',
            sa.Column('player_id', sa.String(length=128), primary_key=True),
            sa.Column('waves_killed', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('zombies_killed', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )

    if 'verification_codes' not in existing_tables:
        op.create_table(
            'verification_codes',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('player_id', sa.String(length=128), nullable=False),
            sa.Column('code', sa.String(length=6), nullable=False),
            sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('expires_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_verification_codes_player_id', 'verification_codes', ['player_id'])
        op.create_index('ix_verification_codes_code', 'verification_codes', ['code'])

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('email_confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'profiles' not in existing_tables:
        op.create_table(
            'profiles',
            sa.Column('id', sa.String(length=36), sa.ForeignKey('users.id'), primary_key=True),
            sa.Column('player_id', sa.String(length=128), nullable=False),
            sa.Column('username', sa.String(length=20), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_profiles_player_id', 'profiles', ['player_id'], unique=True)
        op.create_index('ix_profiles_username', 'profiles', ['username'], unique=True)

    if 'player_sessions' not in existing_tables:
        op.create_table(
            'player_sessions',
            sa.Column('token', sa.String(length=36), primary_key=True),
            sa.Column('player_id', sa.String(length=128), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_player_sessions_player_id', 'player_sessions', ['player_id'])


def downgrade():
    op.drop_index('ix_player_sessions_player_id', table_name='player_sessions')
    op.drop_table('player_sessions')
    op.drop_index('ix_profiles_username', table_name='profiles')
    op.drop_index('ix_profiles_player_id', table_name='profiles')
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_verification_codes_code', table_name='verification_codes')
    op.drop_index('ix_verification_codes_player_id', table_name='verification_codes')
    op.drop_table('verification_codes')
    # player_stats is left in place; it may predate this revision
