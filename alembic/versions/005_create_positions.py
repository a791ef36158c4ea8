"""005: create positions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            id              BIGSERIAL       PRIMARY KEY,
            market_id       BIGINT          NOT NULL REFERENCES markets (id),
            option_id       BIGINT          NOT NULL REFERENCES market_options (id),
            user_address    VARCHAR(128)    NOT NULL REFERENCES users (address),
            amount          NUMERIC(20, 6)  NOT NULL,
            status          VARCHAR(10)     NOT NULL DEFAULT 'pending',
            claimed         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            settled_at      TIMESTAMPTZ,
            CONSTRAINT ck_positions_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_positions_status CHECK (status IN ('pending', 'won', 'lost')),
            CONSTRAINT ck_positions_settled CHECK (
                (status = 'pending' AND settled_at IS NULL)
                OR (status <> 'pending' AND settled_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_positions_user ON positions (user_address, created_at DESC);")
    op.execute("CREATE INDEX idx_positions_market ON positions (market_id);")
    op.execute("CREATE INDEX idx_positions_option ON positions (option_id);")
    op.execute("COMMENT ON TABLE positions IS 'A user stake on one option of one market';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
