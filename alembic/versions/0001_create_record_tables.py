"""Create students, marks, remarks and archives tables

Revision ID: 0001_record_tables
Revises:
Create Date: 2026-10-19

Archives are unique per (term, academic_year). Marks and remarks carry no
foreign key to students so that historic terms survive student removal.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_record_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("id_number", sa.String(50), nullable=True, unique=True),
        sa.Column("class_name", sa.String(50), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "marks",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.BigInteger(), nullable=False),
        sa.Column("class_name", sa.String(50), nullable=True),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("term", sa.String(50), nullable=False),
        sa.Column("academic_year", sa.String(20), nullable=False),
        sa.Column("class_score", sa.DECIMAL(5, 2), nullable=True),
        sa.Column("exams_score", sa.DECIMAL(5, 2), nullable=True),
        sa.Column("grade", sa.String(5), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("teacher_id", sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id", "class_name", "subject", "term", "academic_year",
            name="uq_mark_student_class_subject_term",
        ),
    )
    op.create_index("ix_marks_student_id", "marks", ["student_id"])
    op.create_index("idx_marks_term", "marks", ["term", "academic_year"])

    op.create_table(
        "remarks",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.BigInteger(), nullable=False),
        sa.Column("term", sa.String(50), nullable=False),
        sa.Column("academic_year", sa.String(20), nullable=False),
        sa.Column("conduct", sa.String(255), nullable=True),
        sa.Column("attitude", sa.String(255), nullable=True),
        sa.Column("interest", sa.String(255), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("teacher_id", sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "term", "academic_year", name="uq_remark_student_term"),
    )
    op.create_index("ix_remarks_student_id", "remarks", ["student_id"])
    op.create_index("idx_remarks_term", "remarks", ["term", "academic_year"])

    op.create_table(
        "archives",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("term", sa.String(50), nullable=False),
        sa.Column("academic_year", sa.String(20), nullable=False),
        sa.Column(
            "archived_date",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("archived_by", sa.BigInteger(), nullable=True),
        sa.Column(
            "metadata",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("term", "academic_year", name="uq_archive_term_year"),
    )
    op.create_index("idx_archives_term_year", "archives", ["term", "academic_year"])
    op.create_index("idx_archives_date", "archives", ["archived_date"])


def downgrade() -> None:
    op.drop_index("idx_archives_date", table_name="archives")
    op.drop_index("idx_archives_term_year", table_name="archives")
    op.drop_table("archives")
    op.drop_index("idx_remarks_term", table_name="remarks")
    op.drop_index("ix_remarks_student_id", table_name="remarks")
    op.drop_table("remarks")
    op.drop_index("idx_marks_term", table_name="marks")
    op.drop_index("ix_marks_student_id", table_name="marks")
    op.drop_table("marks")
    op.drop_table("students")
