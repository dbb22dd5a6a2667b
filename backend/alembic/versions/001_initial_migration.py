"""Initial migration: categories, players, tournaments, results, rankings, registrations

Revision ID: 001_initial
Revises:
Create Date: 2025-09-01 00:00:00.000000

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
        sa.Column("game_type", sa.String(), nullable=False),
        sa.Column("level", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("game_type", "level", name="uq_category_game_level"),
    )

    op.create_table(
        "player",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("club", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_player_licence", "player", ["licence"], unique=True)

    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("season", sa.String(), nullable=False),
        sa.Column("tournament_number", sa.Integer(), nullable=False),
        sa.Column("tournament_date", sa.Date(), nullable=True),
        sa.Column("import_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.UniqueConstraint("category_id", "tournament_number", "season", name="uq_category_tournament_season"),
    )
    op.create_index("ix_tournament_category_id", "tournament", ["category_id"])

    op.create_table(
        "tournamentresult",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("match_points", sa.Integer(), nullable=False),
        sa.Column("moyenne", sa.Float(), nullable=False),
        sa.Column("serie", sa.Integer(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("reprises", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "licence", name="uq_tournament_result_licence"),
    )
    op.create_index("ix_tournamentresult_tournament_id", "tournamentresult", ["tournament_id"])

    op.create_table(
        "registration",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("withdrawn", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "licence", name="uq_registration_licence"),
    )
    op.create_index("ix_registration_tournament_id", "registration", ["tournament_id"])

    op.create_table(
        "ranking",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("season", sa.String(), nullable=False),
        sa.Column("licence", sa.String(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("rank_position", sa.Integer(), nullable=False),
        sa.Column("total_match_points", sa.Integer(), nullable=False),
        sa.Column("avg_moyenne", sa.Float(), nullable=False),
        sa.Column("best_serie", sa.Integer(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("total_reprises", sa.Integer(), nullable=False),
        sa.Column("tournament_1_points", sa.Integer(), nullable=True),
        sa.Column("tournament_1_status", sa.String(), nullable=False),
        sa.Column("tournament_2_points", sa.Integer(), nullable=True),
        sa.Column("tournament_2_status", sa.String(), nullable=False),
        sa.Column("tournament_3_points", sa.Integer(), nullable=True),
        sa.Column("tournament_3_status", sa.String(), nullable=False),
        sa.Column("qualified", sa.Boolean(), nullable=False),
        sa.Column("missing_from_directory", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"]),
        sa.UniqueConstraint("category_id", "season", "licence", name="uq_ranking_licence"),
    )
    op.create_index("ix_ranking_category_id", "ranking", ["category_id"])
    op.create_index("ix_ranking_season", "ranking", ["season"])


def downgrade() -> None:
    op.drop_index("ix_ranking_season", table_name="ranking")
    op.drop_index("ix_ranking_category_id", table_name="ranking")
    op.drop_table("ranking")
    op.drop_index("ix_registration_tournament_id", table_name="registration")
    op.drop_table("registration")
    op.drop_index("ix_tournamentresult_tournament_id", table_name="tournamentresult")
    op.drop_table("tournamentresult")
    op.drop_index("ix_tournament_category_id", table_name="tournament")
    op.drop_table("tournament")
    op.drop_index("ix_player_licence", table_name="player")
    op.drop_table("player")
    op.drop_table("category")
