"""005: create votes table

Revision ID: 005
Revises: 004
Create Date: 2026-10-05
"""
from collections.abc import Sequence

from alembic import op

revision: str = "005"
down_revision: str | None = "004"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Append-only: no updated_at, no trigger
    op.execute("""
        CREATE TABLE votes (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         VARCHAR(64)     NOT NULL,
            market_id       VARCHAR(64)     NOT NULL
                REFERENCES prediction_markets (id),
            stance          BOOLEAN         NOT NULL,
            points_staked   BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_votes_user_market         UNIQUE (user_id, market_id),
            CONSTRAINT ck_votes_points_staked_gt_0  CHECK (points_staked > 0)
        );
    """)
    op.execute("CREATE INDEX idx_votes_market ON votes (market_id);")
    op.execute("CREATE INDEX idx_votes_user_created ON votes (user_id, created_at DESC);")
    op.execute("COMMENT ON TABLE votes IS 'One stake per user per market, never updated';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS votes CASCADE;")
