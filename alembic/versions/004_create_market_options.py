"""004: create market_options table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_options (
            id              BIGSERIAL       PRIMARY KEY,
            market_id       BIGINT          NOT NULL REFERENCES markets (id),
            text            VARCHAR(255)    NOT NULL,
            total_staked    NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            CONSTRAINT ck_market_options_staked_gte_0 CHECK (total_staked >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_market_options_market ON market_options (market_id);")
    op.execute("COMMENT ON TABLE market_options IS 'Outcomes of a market with their staked pool';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_options CASCADE;")
