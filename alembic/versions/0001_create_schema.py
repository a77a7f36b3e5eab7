from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
    )
    op.create_index("ix_user_id", "user", ["id"])
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "userRole",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("role", sa.String(255), nullable=False),
        sa.Column("objectId", sa.Integer(), nullable=False),
    )
    op.create_index("ix_userRole_userId", "userRole", ["userId"])
    op.create_index("ix_userRole_objectId", "userRole", ["objectId"])

    # guarda só a assinatura do token
    op.create_table(
        "auth",
        sa.Column("token", sa.String(512), primary_key=True),
        sa.Column("userId", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
    )
    op.create_index("ix_auth_userId", "auth", ["userId"])

    op.create_table(
        "menu",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1024), nullable=False),
        sa.Column("image", sa.String(1024), nullable=False),
        sa.Column("price", sa.Numeric(10, 8), nullable=False),
    )

    # franchise/store/dinerOrder: sem reaproveitar ids no sqlite
    op.create_table(
        "franchise",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.UniqueConstraint("name"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "store",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("franchiseId", sa.Integer(), sa.ForeignKey("franchise.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_store_franchiseId", "store", ["franchiseId"])

    op.create_table(
        "dinerOrder",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("dinerId", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("franchiseId", sa.Integer(), nullable=False),
        sa.Column("storeId", sa.Integer(), nullable=False),
        sa.Column(
            "date",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_dinerOrder_dinerId", "dinerOrder", ["dinerId"])
    op.create_index("ix_dinerOrder_franchiseId", "dinerOrder", ["franchiseId"])
    op.create_index("ix_dinerOrder_storeId", "dinerOrder", ["storeId"])

    op.create_table(
        "orderItem",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("orderId", sa.Integer(), sa.ForeignKey("dinerOrder.id"), nullable=False),
        sa.Column("menuId", sa.Integer(), sa.ForeignKey("menu.id"), nullable=False),
        sa.Column("description", sa.String(1024), nullable=False),
        sa.Column("price", sa.Numeric(10, 8), nullable=False),
    )
    op.create_index("ix_orderItem_orderId", "orderItem", ["orderId"])


def downgrade() -> None:
    op.drop_index("ix_orderItem_orderId", table_name="orderItem")
    op.drop_table("orderItem")
    op.drop_index("ix_dinerOrder_storeId", table_name="dinerOrder")
    op.drop_index("ix_dinerOrder_franchiseId", table_name="dinerOrder")
    op.drop_index("ix_dinerOrder_dinerId", table_name="dinerOrder")
    op.drop_table("dinerOrder")
    op.drop_index("ix_store_franchiseId", table_name="store")
    op.drop_table("store")
    op.drop_table("franchise")
    op.drop_table("menu")
    op.drop_index("ix_auth_userId", table_name="auth")
    op.drop_table("auth")
    op.drop_index("ix_userRole_objectId", table_name="userRole")
    op.drop_index("ix_userRole_userId", table_name="userRole")
    op.drop_table("userRole")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_index("ix_user_id", table_name="user")
    op.drop_table("user")
