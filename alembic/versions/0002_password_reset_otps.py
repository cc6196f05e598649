"""password reset otps

Revision ID: 0002_password_reset_otps
Revises: 0001_initial
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa

revision = "0002_password_reset_otps"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "password_reset_otps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("otpCode", sa.String(length=10), nullable=False),
        sa.Column("expiresAt", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("isUsed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("createdAt", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_password_reset_otps_id", "password_reset_otps", ["id"])
    op.create_index("ix_password_reset_otps_userId", "password_reset_otps", ["userId"])


def downgrade() -> None:
    op.drop_index("ix_password_reset_otps_userId", table_name="password_reset_otps")
    op.drop_index("ix_password_reset_otps_id", table_name="password_reset_otps")
    op.drop_table("password_reset_otps")
