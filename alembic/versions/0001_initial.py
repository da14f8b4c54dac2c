"""Initial schema: tenants, jobs, candidates, assessments, shortlist outcomes

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
        'organizations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), sa.ForeignKey('organizations.id'), nullable=False, index=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50)),
        *_timestamps(),
    )
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('required_skills', sa.JSON()),
        sa.Column('preferred_skills', sa.JSON()),
        sa.Column('experience_required', sa.Integer()),
        sa.Column('status', sa.String(20)),
        *_timestamps(),
    )
    op.create_table(
        'candidates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id'), index=True),
        sa.Column('first_name', sa.String(120)),
        sa.Column('last_name', sa.String(120)),
        sa.Column('full_name', sa.String(240)),
        sa.Column('email', sa.String(254), nullable=False, index=True),
        sa.Column('phone', sa.String(50)),
        sa.Column('skills', sa.JSON()),
        sa.Column('experience_years', sa.Integer()),
        sa.Column('summary', sa.Text()),
        sa.Column('education', sa.Text()),
        sa.Column('cv_file_url', sa.String(512)),
        sa.Column('status', sa.String(30), index=True),
        sa.Column('interview_status', sa.String(30)),
        sa.Column('ats_score', sa.Float()),
        sa.Column('ats_breakdown', sa.JSON()),
        *_timestamps(),
    )
    op.create_table(
        'mcq_test_results',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('candidate_id', sa.Integer(), sa.ForeignKey('candidates.id'), nullable=False, index=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id'), index=True),
        sa.Column('status', sa.String(20)),
        sa.Column('score', sa.Float()),
        sa.Column('percentage', sa.Float()),
        sa.Column('total_questions', sa.Integer()),
        sa.Column('attempted_questions', sa.Integer()),
        sa.Column('correct_answers', sa.Integer()),
        sa.Column('passed', sa.Boolean()),
        *_timestamps(),
    )
    op.create_table(
        'technical_test_results',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('candidate_id', sa.Integer(), sa.ForeignKey('candidates.id'), nullable=False, index=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id'), index=True),
        sa.Column('status', sa.String(20)),
        sa.Column('overall_score', sa.Float()),
        sa.Column('code_quality_score', sa.Float()),
        sa.Column('correctness_score', sa.Float()),
        sa.Column('approach_score', sa.Float()),
        sa.Column('communication_score', sa.Float()),
        sa.Column('feedback', sa.Text()),
        sa.Column('code_review', sa.Text()),
        *_timestamps(),
    )
    op.create_table(
        'interview_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id'), index=True),
        sa.Column('email', sa.String(254), nullable=False, index=True),
        sa.Column('name', sa.String(240)),
        sa.Column('transcript', sa.Text()),
        sa.Column('analysis', sa.Text()),
        sa.Column('ai_score', sa.Numeric(5, 2)),
        sa.Column('score', sa.Numeric(5, 2)),
        sa.Column('recording_url', sa.String(512)),
        sa.Column('interview_status', sa.String(20)),
        *_timestamps(),
    )
    op.create_table(
        'shortlist_outcomes',
        sa.Column('id', sa.Integer(), sa.ForeignKey('candidates.id'), primary_key=True, autoincrement=False),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id'), index=True),
        sa.Column('name', sa.String(240)),
        sa.Column('email', sa.String(254)),
        sa.Column('phone', sa.String(50)),
        sa.Column('cv_file_url', sa.String(512)),
        sa.Column('interview_status', sa.String(30)),
        sa.Column('status', sa.String(20), index=True),
        sa.Column('recommendation', sa.String(20)),
        sa.Column('confidence', sa.Float()),
        sa.Column('hire_readiness', sa.String(20)),
        sa.Column('priority', sa.String(10)),
        sa.Column('notes', sa.Text()),
        sa.Column('analysis', sa.JSON()),
        sa.Column('ai_score', sa.Float()),
        sa.Column('ats_score', sa.Float()),
        sa.Column('mcq_score', sa.Float()),
        sa.Column('technical_score', sa.Float()),
        sa.Column('interview_score', sa.Float()),
        sa.Column('total_score', sa.Integer()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('org_id', sa.Integer(), nullable=False, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('action_type', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50)),
        sa.Column('entity_id', sa.Integer()),
        sa.Column('entity_name', sa.String(240)),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(50)),
        sa.Column('severity', sa.String(20)),
        sa.Column('metadata', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    for name in ('activity_logs', 'shortlist_outcomes', 'interview_records', 'technical_test_results',
                 'mcq_test_results', 'candidates', 'jobs', 'users', 'organizations'):
        op.drop_table(name)
