"""004: create prediction_markets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-05
"""
from collections.abc import Sequence

from alembic import op

revision: str = "004"
down_revision: str | None = "003"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE prediction_markets (
            id                  VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            owner_id            VARCHAR(64)     NOT NULL,
            title               VARCHAR(500)    NOT NULL,
            description         TEXT,
            category            VARCHAR(64),
            resolution_deadline TIMESTAMPTZ     NOT NULL,
            resolved            BOOLEAN         NOT NULL DEFAULT FALSE,
            outcome             BOOLEAN,
            stake_count         INTEGER         NOT NULL DEFAULT 0,
            total_points        BIGINT          NOT NULL DEFAULT 0,
            yes_count           INTEGER         NOT NULL DEFAULT 0,
            no_count            INTEGER         NOT NULL DEFAULT 0,
            yes_points          BIGINT          NOT NULL DEFAULT 0,
            no_points           BIGINT          NOT NULL DEFAULT 0,
            resolved_at         TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_prediction_markets_outcome_iff_resolved
                CHECK ((resolved AND outcome IS NOT NULL) OR (NOT resolved AND outcome IS NULL)),
            CONSTRAINT ck_prediction_markets_counts
                CHECK (stake_count = yes_count + no_count AND total_points = yes_points + no_points)
        );
    """)
    op.execute(
        "CREATE INDEX idx_prediction_markets_feed"
        " ON prediction_markets (resolved, created_at DESC, id DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_prediction_markets_updated_at
            BEFORE UPDATE ON prediction_markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE prediction_markets IS"
        " 'Binary markets; stake_count..no_points are a projection of votes';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS prediction_markets CASCADE;")
