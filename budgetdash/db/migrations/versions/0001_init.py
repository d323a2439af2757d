"""init

Revision ID: 0001_init
Revises:
Create Date: 2026-09-02

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]

def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("login", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=256), nullable=True),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("sales_rep_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_user_login", "user", ["login"], unique=True)

    op.create_table(
        "import_run",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("division", sa.String(length=8), nullable=False),
        sa.Column("kind", sa.String(length=32), nullable=False, server_default="actual_xlsx"),
        sa.Column("file_name", sa.String(length=512), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=False),
        sa.Column("uploaded_by", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="queued"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rows_loaded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("errors_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("division", "file_hash", name="uq_import_division_hash"),
    )
    op.create_index("ix_import_run_division", "import_run", ["division"])
    op.create_index("ix_import_run_file_hash", "import_run", ["file_hash"])

    op.create_table(
        "import_row_error",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("import_run_id", sa.Integer(), sa.ForeignKey("import_run.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sheet", sa.String(length=128), nullable=True),
        sa.Column("row_num", sa.Integer(), nullable=True),
        sa.Column("column", sa.String(length=128), nullable=True),
        sa.Column("raw_value", sa.String(length=255), nullable=True),
        sa.Column("customer", sa.String(length=255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
    )
    op.create_index("ix_import_row_error_import_run_id", "import_row_error", ["import_run_id"])

    op.create_table(
        "sales_fact",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("import_run_id", sa.Integer(), sa.ForeignKey("import_run.id", ondelete="SET NULL"), nullable=True),
        sa.Column("division", sa.String(length=8), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("record_type", sa.String(length=16), nullable=False),
        sa.Column("sales_rep", sa.String(length=255), nullable=False),
        sa.Column("customer", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=255), nullable=False),
        sa.Column("product_group", sa.String(length=255), nullable=False),
        sa.Column("material", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("process", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("value_type", sa.String(length=16), nullable=False),
        sa.Column("value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("unit", sa.String(length=16), nullable=False),
        sa.Column("uploaded_filename", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "division", "year", "month", "sales_rep", "customer", "country",
            "product_group", "value_type", "record_type",
            name="uq_sales_fact_tuple",
        ),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_sales_fact_month"),
    )
    op.create_index("ix_sales_fact_division", "sales_fact", ["division"])
    op.create_index("ix_sales_fact_sales_rep", "sales_fact", ["sales_rep"])
    op.create_index("ix_sales_fact_lookup", "sales_fact", ["division", "year", "value_type", "record_type"])

    op.create_table(
        "customer_merge_rule",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("division", sa.String(length=8), nullable=False),
        sa.Column("sales_rep", sa.String(length=255), nullable=False),
        sa.Column("merged_customer_name", sa.String(length=255), nullable=False),
        sa.Column("original_customers", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("division", "sales_rep", "merged_customer_name", name="uq_merge_rule_scope_name"),
    )
    op.create_index("ix_customer_merge_rule_division", "customer_merge_rule", ["division"])
    op.create_index("ix_customer_merge_rule_sales_rep", "customer_merge_rule", ["sales_rep"])

    op.create_table(
        "product_group_pricing",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("division", sa.String(length=8), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("product_group", sa.String(length=255), nullable=False),
        sa.Column("asp", sa.Float(), nullable=True),
        sa.Column("morm", sa.Float(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("division", "year", "product_group", name="uq_pricing_division_year_group"),
    )
    op.create_index("ix_product_group_pricing_division", "product_group_pricing", ["division"])


def downgrade():
    op.drop_table("product_group_pricing")
    op.drop_table("customer_merge_rule")
    op.drop_table("sales_fact")
    op.drop_table("import_row_error")
    op.drop_table("import_run")
    op.drop_table("user")
