"""Initial schema: companies, candidates, jobs, credit codes, ledger, assessments, notifications

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('industry', sa.String(120)),
        sa.Column('description', sa.Text()),
        sa.Column('logo_url', sa.String(500)),
        sa.Column('credits', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('plan', sa.String(10), nullable=False, server_default='FREE'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint('credits >= 0', name='ck_companies_credits_non_negative'),
    )
    op.create_index('ix_companies_code', 'companies', ['code'], unique=True)

    op.create_table(
        'candidates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_code', sa.String(20), sa.ForeignKey('companies.code'), nullable=False),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('phone', sa.String(40)),
        sa.Column('role', sa.String(160)),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('location', sa.JSON()),
        *_timestamps(),
    )
    op.create_index('ix_candidates_email', 'candidates', ['email'], unique=True)
    op.create_index('ix_candidates_company_code', 'candidates', ['company_code'])

    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_code', sa.String(20), sa.ForeignKey('companies.code'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('location', sa.String(200)),
        sa.Column('salary', sa.String(120)),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('tags', sa.JSON()),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_jobs_company_code', 'jobs', ['company_code'])

    op.create_table(
        'credit_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(16), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('is_redeemed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('redeemed_by', sa.String(20), sa.ForeignKey('companies.code')),
        sa.Column('redeemed_at', sa.DateTime()),
        *_timestamps(),
    )
    op.create_index('ix_credit_codes_code', 'credit_codes', ['code'], unique=True)

    op.create_table(
        'ledger_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_code', sa.String(20), sa.ForeignKey('companies.code'), nullable=False),
        sa.Column('delta', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('reference', sa.String(64)),
        sa.Column('balance_after', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('company_code', 'kind', 'reference', name='uq_ledger_entries_company_kind_ref'),
    )
    op.create_index('ix_ledger_entries_company_code', 'ledger_entries', ['company_code'])

    op.create_table(
        'assessments',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('company_code', sa.String(20), sa.ForeignKey('companies.code'), nullable=False),
        sa.Column('candidate_email', sa.String(254), sa.ForeignKey('candidates.email'), nullable=False),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id'), nullable=True),
        sa.Column('candidate_type', sa.String(20), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('report', sa.JSON(), nullable=True),
        sa.Column('report_source', sa.String(20), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('is_unlocked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('analysis_started_at', sa.DateTime()),
        sa.Column('completed_at', sa.DateTime()),
    )
    op.create_index('ix_assessments_company_code', 'assessments', ['company_code'])
    op.create_index('ix_assessments_candidate_email', 'assessments', ['candidate_email'])
    op.create_index('ix_assessments_status', 'assessments', ['status'])
    op.create_index('ix_assessments_company_created', 'assessments', ['company_code', 'created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_code', sa.String(20), sa.ForeignKey('companies.code'), nullable=False),
        sa.Column('kind', sa.String(50)),
        sa.Column('provider', sa.String(50)),
        sa.Column('sent_to', sa.String(255)),
        sa.Column('subject', sa.String(255)),
        sa.Column('body', sa.Text()),
        sa.Column('provider_status', sa.String(255)),
        sa.Column('sent_at', sa.DateTime()),
        *_timestamps(),
    )
    op.create_index('ix_notifications_company_code', 'notifications', ['company_code'])


def downgrade() -> None:
    for table in ('notifications', 'assessments', 'ledger_entries', 'credit_codes', 'jobs', 'candidates', 'companies'):
        op.drop_table(table)
