"""threshold reward type

Revision ID: v3
Revises: v2
Create Date: 2026-01-25 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "v3"
down_revision: Union[str, Sequence[str], None] = "v2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

offers = sa.table(
    "offers",
    sa.column("reward_type", sa.String),
    sa.column("rate", sa.Float),
    sa.column("cashback_cap", sa.Float),
    sa.column("reward_amount", sa.Float),
    sa.column("spend_threshold", sa.Float),
)


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table("offers", schema=None) as batch_op:
        batch_op.add_column(sa.Column("reward_type", sa.String(length=20), nullable=True))
        batch_op.add_column(sa.Column("reward_amount", sa.Float(), nullable=True))
        batch_op.add_column(sa.Column("spend_threshold", sa.Float(), nullable=True))
        batch_op.create_index(batch_op.f("ix_offers_reward_type"), ["reward_type"], unique=False)

    backfill_reward_terms()


def backfill_reward_terms() -> None:
    """Fill reward terms left unset on rows written before they existed."""
    cashback_cap = sa.func.coalesce(offers.c.cashback_cap, 0.0)

    # Every offer stored before threshold rewards existed was a percentage offer.
    op.execute(
        offers.update()
        .where(sa.or_(offers.c.reward_type.is_(None), offers.c.reward_type == ""))
        .values(reward_type="percentage")
    )
    op.execute(
        offers.update()
        .where(offers.c.reward_amount.is_(None))
        .values(reward_amount=cashback_cap)
    )
    # Spend needed to hit the cap; rate-less offers have none and stay unset.
    op.execute(
        offers.update()
        .where(
            offers.c.reward_type == "percentage",
            offers.c.spend_threshold.is_(None),
            offers.c.rate > 0,
        )
        .values(spend_threshold=cashback_cap / offers.c.rate)
    )
    op.execute(
        offers.update()
        .where(
            offers.c.reward_type == "threshold",
            offers.c.spend_threshold.is_(None),
        )
        .values(spend_threshold=0.0)
    )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("offers", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_offers_reward_type"))
        batch_op.drop_column("spend_threshold")
        batch_op.drop_column("reward_amount")
        batch_op.drop_column("reward_type")
