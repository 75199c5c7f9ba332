"""Initial schema: category, player, round, match, standing

Revision ID: 001_initial
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("season_year", sa.Integer(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "player",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("initial_category_id", sa.Integer(), nullable=True),
        sa.Column("current_category_id", sa.Integer(), nullable=True),
        sa.Column("deactivated_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["initial_category_id"], ["category.id"]),
        sa.ForeignKeyConstraint(["current_category_id"], ["category.id"]),
    )
    op.create_index("ix_player_current_category_id", "player", ["current_category_id"])

    op.create_table(
        "round",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.UniqueConstraint("category_id", "round_number", name="uq_category_round_number"),
    )
    op.create_index("ix_round_category_id", "round", ["category_id"])

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("round_id", sa.Integer(), nullable=False),
        sa.Column("sequence_in_round", sa.Integer(), nullable=False),
        sa.Column("player_a_id", sa.Integer(), nullable=False),
        sa.Column("player_b_id", sa.Integer(), nullable=False),
        sa.Column("outcome_kind", sa.String(), nullable=False, server_default="undecided"),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("sets_json", sa.JSON(), nullable=True),
        sa.Column("walkover_reason", sa.String(), nullable=True),
        sa.Column("result_loaded_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.ForeignKeyConstraint(["round_id"], ["round.id"]),
        sa.ForeignKeyConstraint(["player_a_id"], ["player.id"]),
        sa.ForeignKeyConstraint(["player_b_id"], ["player.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["player.id"]),
        sa.CheckConstraint("player_a_id <> player_b_id", name="ck_match_distinct_players"),
    )
    op.create_index("ix_match_category_id", "match", ["category_id"])
    op.create_index("ix_match_round_id", "match", ["round_id"])
    op.create_index("ix_match_player_a_id", "match", ["player_a_id"])
    op.create_index("ix_match_player_b_id", "match", ["player_b_id"])

    op.create_table(
        "standing",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_won", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_lost", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_won_by_wo", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_lost_by_wo", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("matches_not_reported", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sets_won", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sets_lost", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("games_won", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("games_lost", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.ForeignKeyConstraint(["player_id"], ["player.id"]),
        sa.UniqueConstraint("category_id", "player_id", name="uq_category_player_standing"),
    )
    op.create_index("ix_standing_category_id", "standing", ["category_id"])


def downgrade() -> None:
    op.drop_index("ix_standing_category_id", table_name="standing")
    op.drop_table("standing")
    op.drop_index("ix_match_player_b_id", table_name="match")
    op.drop_index("ix_match_player_a_id", table_name="match")
    op.drop_index("ix_match_round_id", table_name="match")
    op.drop_index("ix_match_category_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_round_category_id", table_name="round")
    op.drop_table("round")
    op.drop_index("ix_player_current_category_id", table_name="player")
    op.drop_table("player")
    op.drop_table("category")
