"""initial schema: users, reports, vitals, report links, shared access, revoked tokens

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a9b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='owner'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('file_type', sa.String(length=100), nullable=False),
        sa.Column('report_type', sa.String(length=100), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reports_user_id', 'reports', ['user_id'])
    op.create_index('ix_reports_date', 'reports', ['date'])

    op.create_table('vitals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('vital_type', sa.String(length=100), nullable=False),
        sa.Column('value', sa.String(length=100), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_vitals_user_id', 'vitals', ['user_id'])
    op.create_index('ix_vitals_vital_type', 'vitals', ['vital_type'])
    op.create_index('ix_vitals_date', 'vitals', ['date'])

    op.create_table('report_vitals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('report_id', sa.Integer(), nullable=False),
        sa.Column('vital_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['report_id'], ['reports.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vital_id'], ['vitals.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_report_vitals_report_id', 'report_vitals', ['report_id'])
    op.create_index('ix_report_vitals_vital_id', 'report_vitals', ['vital_id'])

    op.create_table('shared_access',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('report_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('shared_with_id', sa.Integer(), nullable=False),
        sa.Column('access_type', sa.String(length=20), nullable=False, server_default='read'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['report_id'], ['reports.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shared_with_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('report_id', 'shared_with_id', name='uq_shared_access_report_grantee')
    )
    op.create_index('ix_shared_access_report_id', 'shared_access', ['report_id'])
    op.create_index('ix_shared_access_owner_id', 'shared_access', ['owner_id'])
    op.create_index('ix_shared_access_shared_with_id', 'shared_access', ['shared_with_id'])

    op.create_table('revoked_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('jti', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'], unique=True)


def downgrade():
    op.drop_index('ix_revoked_tokens_jti', table_name='revoked_tokens')
    op.drop_table('revoked_tokens')
    op.drop_index('ix_shared_access_shared_with_id', table_name='shared_access')
    op.drop_index('ix_shared_access_owner_id', table_name='shared_access')
    op.drop_index('ix_shared_access_report_id', table_name='shared_access')
    op.drop_table('shared_access')
    op.drop_index('ix_report_vitals_vital_id', table_name='report_vitals')
    op.drop_index('ix_report_vitals_report_id', table_name='report_vitals')
    op.drop_table('report_vitals')
    op.drop_index('ix_vitals_date', table_name='vitals')
    op.drop_index('ix_vitals_vital_type', table_name='vitals')
    op.drop_index('ix_vitals_user_id', table_name='vitals')
    op.drop_table('vitals')
    op.drop_index('ix_reports_date', table_name='reports')
    op.drop_index('ix_reports_user_id', table_name='reports')
    op.drop_table('reports')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
