"""create study sets, progress and test results tables

Revision ID: create_study_sets_and_progress
Revises:
Create Date: 2026-10-19

Creates the study_sets, flashcards, user_flashcard_progress and
test_results tables.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.engine.reflection import Inspector

# revision identifiers, used by Alembic.
revision: str = 'create_study_sets_and_progress'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

mastery_status = sa.Enum('new', 'learning', 'mastered', name='mastery_status')


def upgrade() -> None:
    # Get connection and inspector
    conn = op.get_bind()
    inspector = Inspector.from_engine(conn)
    existing_tables = inspector.get_table_names()

    if 'study_sets' not in existing_tables:
        op.create_table(
            'study_sets',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('title', sa.String(200), nullable=False, index=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('user_id', sa.String(255), nullable=False, index=True),
            sa.Column(
                'created_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.Column(
                'updated_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
        )

    if 'flashcards' not in existing_tables:
        op.create_table(
            'flashcards',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('term', sa.Text(), nullable=False),
            sa.Column('definition', sa.Text(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('study_set_id', sa.String(36), nullable=False, index=True),
            sa.Column(
                'created_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.ForeignKeyConstraint(
                ['study_set_id'],
                ['study_sets.id'],
                name='fk_flashcards_study_set_id',
                ondelete='CASCADE'
            ),
        )

        # Composite index for ordered card listing
        op.create_index(
            'ix_flashcards_set_position',
            'flashcards',
            ['study_set_id', 'position']
        )

    if 'user_flashcard_progress' not in existing_tables:
        op.create_table(
            'user_flashcard_progress',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('user_id', sa.String(255), nullable=False, index=True),
            sa.Column('flashcard_id', sa.String(36), nullable=False, index=True),
            sa.Column('status', mastery_status, nullable=False, server_default='new'),
            sa.Column('correct_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('incorrect_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_studied_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column(
                'created_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.Column(
                'updated_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.ForeignKeyConstraint(
                ['flashcard_id'],
                ['flashcards.id'],
                name='fk_progress_flashcard_id',
                ondelete='CASCADE'
            ),
            sa.UniqueConstraint('user_id', 'flashcard_id', name='uq_progress_user_flashcard'),
        )

    if 'test_results' not in existing_tables:
        op.create_table(
            'test_results',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('user_id', sa.String(255), nullable=False, index=True),
            sa.Column('study_set_id', sa.String(36), nullable=False, index=True),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('total_questions', sa.Integer(), nullable=False),
            sa.Column('percentage', sa.Float(), nullable=False),
            sa.Column('question_types', sa.JSON(), nullable=False),
            sa.Column('answers', sa.JSON(), nullable=False),
            sa.Column(
                'completed_at',
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now()
            ),
            sa.ForeignKeyConstraint(
                ['study_set_id'],
                ['study_sets.id'],
                name='fk_test_results_study_set_id',
                ondelete='CASCADE'
            ),
        )

        # Composite index for the history query
        op.create_index(
            'ix_test_results_user_completed',
            'test_results',
            ['user_id', 'completed_at']
        )


def downgrade() -> None:
    # Get connection and inspector
    conn = op.get_bind()
    inspector = Inspector.from_engine(conn)
    existing_tables = inspector.get_table_names()

    if 'test_results' in existing_tables:
        op.drop_index('ix_test_results_user_completed', table_name='test_results')
        op.drop_table('test_results')

    if 'user_flashcard_progress' in existing_tables:
        op.drop_table('user_flashcard_progress')
        mastery_status.drop(conn, checkfirst=True)

    if 'flashcards' in existing_tables:
        op.drop_index('ix_flashcards_set_position', table_name='flashcards')
        op.drop_table('flashcards')

    if 'study_sets' in existing_tables:
        op.drop_table('study_sets')
