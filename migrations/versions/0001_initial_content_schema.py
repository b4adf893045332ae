"""initial content schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 10:12:40.118204

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ts(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        _ts(),
    )
    op.create_table(
        "textbooks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "group_id",
            sa.String(36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("google_sheet_url", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        _ts(),
    )
    op.create_index("ix_textbooks_group_id", "textbooks", ["group_id"])

    op.create_table(
        "units",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "textbook_id",
            sa.String(36),
            sa.ForeignKey("textbooks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        _ts(),
    )
    op.create_index("ix_units_textbook_id", "units", ["textbook_id"])

    op.create_table(
        "passages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "unit_id", sa.String(36), sa.ForeignKey("units.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("korean_translation", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        _ts(),
    )
    op.create_index("ix_passages_unit_id", "passages", ["unit_id"])

    op.create_table(
        "prompt_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("variables", sa.JSON(), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("preferred_model", sa.String(128), nullable=False),
        _ts(),
        _ts("updated_at"),
    )

    op.create_table(
        "question_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "prompt_template_id",
            sa.String(36),
            sa.ForeignKey("prompt_templates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("question_group", sa.String(64), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        _ts(),
    )
    op.create_index(
        "ix_question_types_prompt_template_id", "question_types", ["prompt_template_id"]
    )

    op.create_table(
        "generated_questions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "passage_id",
            sa.String(36),
            sa.ForeignKey("passages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "question_type_id",
            sa.String(36),
            sa.ForeignKey("question_types.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("instruction", sa.Text(), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("choices", sa.JSON(), nullable=True),
        sa.Column("answer", sa.Text(), nullable=True),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        _ts(),
    )
    op.create_index(
        "ix_generated_questions_passage_type",
        "generated_questions",
        ["passage_id", "question_type_id"],
    )
    op.create_index("ix_generated_questions_created_at", "generated_questions", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_generated_questions_created_at", table_name="generated_questions")
    op.drop_index("ix_generated_questions_passage_type", table_name="generated_questions")
    op.drop_table("generated_questions")
    op.drop_index("ix_question_types_prompt_template_id", table_name="question_types")
    op.drop_table("question_types")
    op.drop_table("prompt_templates")
    op.drop_index("ix_passages_unit_id", table_name="passages")
    op.drop_table("passages")
    op.drop_index("ix_units_textbook_id", table_name="units")
    op.drop_table("units")
    op.drop_index("ix_textbooks_group_id", table_name="textbooks")
    op.drop_table("textbooks")
    op.drop_table("groups")
