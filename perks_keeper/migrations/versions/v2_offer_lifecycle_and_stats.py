"""offer lifecycle fields and lifetime stats

Revision ID: v2
Revises: v1
Create Date: 2025-12-14 00:00:00.000000

"""
from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "v2"
down_revision: Union[str, Sequence[str], None] = "v1"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

offers = sa.table(
    "offers",
    sa.column("status", sa.String),
    sa.column("credited_to_lifetime", sa.Integer),
)


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table("offers", schema=None) as batch_op:
        batch_op.add_column(sa.Column("status", sa.String(length=20), nullable=True))
        batch_op.add_column(sa.Column("archived_at", sa.String(length=26), nullable=True))
        batch_op.add_column(sa.Column("credited_to_lifetime", sa.Integer(), nullable=True))
        batch_op.drop_index(batch_op.f("ix_offers_merchant"))
        batch_op.create_index(batch_op.f("ix_offers_status"), ["status"], unique=False)

    stats = op.create_table(
        "stats",
        sa.Column("id", sa.String(length=16), nullable=False),
        sa.Column("lifetime_cashback_earned", sa.Float(), nullable=False),
        sa.Column("last_updated_at", sa.String(length=26), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # Backfills only touch missing values so a legitimate stored value is never overwritten.
    op.execute(
        offers.update()
        .where(sa.or_(offers.c.status.is_(None), offers.c.status == ""))
        .values(status="active")
    )
    op.execute(
        offers.update()
        .where(offers.c.credited_to_lifetime.is_(None))
        .values(credited_to_lifetime=0)
    )

    existing = op.get_bind().execute(sa.select(stats.c.id).where(stats.c.id == "app")).first()
    if existing is None:
        op.bulk_insert(
            stats,
            [
                {
                    "id": "app",
                    "lifetime_cashback_earned": 0.0,
                    "last_updated_at": datetime.now(timezone.utc).replace(tzinfo=None).isoformat(),
                }
            ],
        )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("stats")

    with op.batch_alter_table("offers", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_offers_status"))
        batch_op.create_index(batch_op.f("ix_offers_merchant"), ["merchant"], unique=False)
        batch_op.drop_column("credited_to_lifetime")
        batch_op.drop_column("archived_at")
        batch_op.drop_column("status")
