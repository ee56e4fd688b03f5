"""initial offer store

Revision ID: v1
Revises:
Create Date: 2025-11-02 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "v1"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "cards",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("issuer", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.Column("updated_at", sa.String(length=26), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("cards", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_cards_issuer"), ["issuer"], unique=False)
        batch_op.create_index(batch_op.f("ix_cards_name"), ["name"], unique=False)
        batch_op.create_index(batch_op.f("ix_cards_created_at"), ["created_at"], unique=False)
        batch_op.create_index(batch_op.f("ix_cards_updated_at"), ["updated_at"], unique=False)

    op.create_table(
        "offers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("card_id", sa.String(length=36), nullable=False),
        sa.Column("merchant", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("cashback_cap", sa.Float(), nullable=False),
        sa.Column("total_spend_tracked", sa.Float(), nullable=False),
        sa.Column("cashback_earned", sa.Float(), nullable=False),
        sa.Column("expire_at", sa.String(length=26), nullable=False),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.Column("updated_at", sa.String(length=26), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("offers", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_offers_card_id"), ["card_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_offers_merchant"), ["merchant"], unique=False)
        batch_op.create_index(batch_op.f("ix_offers_category"), ["category"], unique=False)
        batch_op.create_index(batch_op.f("ix_offers_expire_at"), ["expire_at"], unique=False)
        batch_op.create_index(batch_op.f("ix_offers_created_at"), ["created_at"], unique=False)
        batch_op.create_index(batch_op.f("ix_offers_updated_at"), ["updated_at"], unique=False)
        batch_op.create_index(batch_op.f("ix_offers_cashback_earned"), ["cashback_earned"], unique=False)

    op.create_table(
        "spend_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("offer_id", sa.String(length=36), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.String(length=26), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("spend_logs", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_spend_logs_offer_id"), ["offer_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_spend_logs_created_at"), ["created_at"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("spend_logs")
    op.drop_table("offers")
    op.drop_table("cards")
