"""Initial contest schema: team, question, submission, submission_log,
team_question_score

Revision ID: a7c41d93e2f0
Revises:
Create Date: 2026-10-19 10:12:31.402117

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a7c41d93e2f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    from sqlalchemy import inspect
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # db.create_all may already have built the tables
    if 'team' not in existing_tables:
        op.create_table('team',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('team_name', sa.String(length=120), nullable=False),
            sa.Column('emails_json', sa.Text(), nullable=False),
            sa.Column('roll_nos_json', sa.Text(), nullable=False),
            sa.Column('year', sa.Integer(), nullable=False),
            sa.Column('score', sa.Float(), nullable=False),
            sa.Column('otp_hash', sa.String(length=256), nullable=True),
            sa.Column('otp_generated_at', sa.DateTime(), nullable=True),
            sa.Column('otp_expires_at', sa.DateTime(), nullable=True),
            sa.Column('otp_attempts', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('team', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_team_team_name'), ['team_name'], unique=True)
            batch_op.create_index(batch_op.f('ix_team_year'), ['year'], unique=False)

    if 'question' not in existing_tables:
        op.create_table('question',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('year', sa.Integer(), nullable=False),
            sa.Column('number', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('correct_code', sa.Text(), nullable=False),
            sa.Column('incorrect_code', sa.Text(), nullable=False),
            sa.Column('test_cases_json', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('year', 'number', name='uq_question_year_number'),
        )
        with op.batch_alter_table('question', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_question_year'), ['year'], unique=False)

    if 'submission' not in existing_tables:
        op.create_table('submission',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('team_id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('code', sa.Text(), nullable=False),
            sa.Column('testcases_passed', sa.Integer(), nullable=False),
            sa.Column('all_passed', sa.Boolean(), nullable=False),
            sa.Column('syntax_error', sa.Integer(), nullable=False),
            sa.Column('wrong_submission', sa.Integer(), nullable=False),
            sa.Column('score', sa.Float(), nullable=False),
            sa.Column('solved_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['question_id'], ['question.id']),
            sa.ForeignKeyConstraint(['team_id'], ['team.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('team_id', 'question_id', name='uq_submission_team_question'),
        )
        with op.batch_alter_table('submission', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_submission_team_id'), ['team_id'], unique=False)
            batch_op.create_index(batch_op.f('ix_submission_question_id'), ['question_id'], unique=False)

    if 'submission_log' not in existing_tables:
        op.create_table('submission_log',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('submission_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['submission_id'], ['submission.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('submission_log', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_submission_log_submission_id'), ['submission_id'], unique=False)

    if 'team_question_score' not in existing_tables:
        op.create_table('team_question_score',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('team_id', sa.Integer(), nullable=False),
            sa.Column('question_number', sa.Integer(), nullable=False),
            sa.Column('testcases_passed', sa.Integer(), nullable=False),
            sa.Column('score', sa.Float(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['team_id'], ['team.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('team_id', 'question_number', name='uq_team_question_score_team_number'),
        )
        with op.batch_alter_table('team_question_score', schema=None) as batch_op:
            batch_op.create_index(batch_op.f('ix_team_question_score_team_id'), ['team_id'], unique=False)


def downgrade():
    op.drop_table('team_question_score')
    op.drop_table('submission_log')
    op.drop_table('submission')
    op.drop_table('question')
    op.drop_table('team')
