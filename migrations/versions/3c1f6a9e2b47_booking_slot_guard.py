"""booking slot guard

Revision ID: 3c1f6a9e2b47
Revises: 
Create Date: 2026-10-18 09:12:44.501233

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c1f6a9e2b47'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")

    op.execute(
        """
        CREATE TABLE addon (
          id text PRIMARY KEY,
          name text NOT NULL,
          price numeric(12, 2) NOT NULL CHECK (price >= 0),
          is_active boolean NOT NULL DEFAULT true
        );
        """
    )

    op.execute(
        """
        CREATE TABLE booking (
          id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
          occasion text NOT NULL,
          theme_id text NOT NULL,
          event_date date NOT NULL,
          start_time time NOT NULL,
          end_time time NOT NULL CHECK (end_time > start_time),
          guest_count integer NOT NULL CHECK (guest_count > 0),
          budget_range text NOT NULL,
          addon_ids jsonb NOT NULL DEFAULT '[]'::jsonb,
          location jsonb,
          customer_name text NOT NULL,
          customer_email text NOT NULL,
          customer_phone text NOT NULL,
          special_requests text,
          total_amount integer NOT NULL,
          token_amount integer NOT NULL,
          status text NOT NULL DEFAULT 'PENDING'
            CHECK (status IN ('PENDING', 'CONFIRMED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')),
          payment_status text NOT NULL DEFAULT 'PENDING'
            CHECK (payment_status IN ('PENDING', 'PAID', 'FAILED', 'REFUNDED')),
          created_at timestamptz NOT NULL DEFAULT now(),
          updated_at timestamptz NOT NULL DEFAULT now(),
          CONSTRAINT booking_no_overlap EXCLUDE USING gist (
            (coalesce(lower(location->>'city'), '')) WITH =,
            tsrange(event_date + start_time, event_date + end_time, '[)') WITH &&
          ) WHERE (status IN ('PENDING', 'CONFIRMED', 'IN_PROGRESS'))
        );
        """
    )
    op.execute("CREATE INDEX booking_event_date_status_idx ON booking (event_date, status);")


def downgrade() -> None:
    op.drop_table("booking", schema="public")
    op.drop_table("addon", schema="public")
    op.execute("DROP EXTENSION IF EXISTS btree_gist;")
    op.execute("DROP EXTENSION IF EXISTS pgcrypto;")
