"""003: create point_accounts table

Revision ID: 003
Revises: 002
Create Date: 2026-10-05
"""
from collections.abc import Sequence

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE point_accounts (
            id                          UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id                     VARCHAR(64)     NOT NULL,
            balance                     BIGINT          NOT NULL DEFAULT 0,
            lifetime_predictions_made   INTEGER         NOT NULL DEFAULT 0,
            lifetime_correct            INTEGER         NOT NULL DEFAULT 0,
            accuracy_percent            NUMERIC(5, 2)   NOT NULL DEFAULT 0,
            version                     BIGINT          NOT NULL DEFAULT 0,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_point_accounts_user_id        UNIQUE (user_id),
            CONSTRAINT ck_point_accounts_balance_gte_0  CHECK (balance >= 0),
            CONSTRAINT ck_point_accounts_correct_lte_made
                CHECK (lifetime_correct >= 0 AND lifetime_correct <= lifetime_predictions_made),
            CONSTRAINT ck_point_accounts_accuracy_range
                CHECK (accuracy_percent >= 0 AND accuracy_percent <= 100)
        );
    """)
    op.execute(
        "CREATE INDEX idx_point_accounts_leaderboard"
        " ON point_accounts (balance DESC, accuracy_percent DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_point_accounts_updated_at
            BEFORE UPDATE ON point_accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE point_accounts IS 'Spendable points and lifetime accuracy per user';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS point_accounts CASCADE;")
