"""003: create markets table

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # winning_option_id carries no FK: options are deleted before their market.
    op.execute("""
        CREATE TABLE markets (
            id                  BIGSERIAL       PRIMARY KEY,
            question            VARCHAR(500)    NOT NULL,
            description         TEXT            NOT NULL DEFAULT '',
            category            VARCHAR(64)     NOT NULL DEFAULT 'Cricket',
            banner_url          TEXT,
            close_time          TIMESTAMPTZ     NOT NULL,
            creator_id          VARCHAR(128)    NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'open',
            winning_option_id   BIGINT,
            total_liquidity     NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_liquidity_gte_0 CHECK (total_liquidity >= 0),
            CONSTRAINT ck_markets_status CHECK (status IN ('open', 'resolved')),
            CONSTRAINT ck_markets_resolution CHECK (
                (status = 'open' AND winning_option_id IS NULL)
                OR (status = 'resolved' AND winning_option_id IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_status ON markets (status);")
    op.execute("CREATE INDEX idx_markets_created_at ON markets (created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Questions with an open/resolved lifecycle and a shared liquidity pool';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
