"""Create card, deck and state config tables."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cards",
        sa.Column("path", sa.Text(), primary_key=True, nullable=False),
        sa.Column("decks", sa.JSON(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("due", sa.DateTime(timezone=True), nullable=False),
        sa.Column("interval", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("memorisation_factor", sa.Float(), server_default=sa.text("1300"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_cards_due", "cards", ("due",))

    op.create_table(
        "decks",
        sa.Column("name", sa.String(length=255), primary_key=True, nullable=False),
        sa.Column("card_paths", sa.JSON(), nullable=False),
        sa.Column("pass_coef", sa.Float(), server_default=sa.text("1.0"), nullable=False),
        sa.Column("easy_coef", sa.Float(), server_default=sa.text("1.3"), nullable=False),
        sa.Column("fail_coef", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_table(
        "state_config",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("card_parsing_config", sa.JSON(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("state_config")
    op.drop_table("decks")
    op.drop_index("ix_cards_due", table_name="cards")
    op.drop_table("cards")
