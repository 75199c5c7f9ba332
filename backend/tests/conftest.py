import os
from datetime import date

# Keep app startup (init_db) off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from league.config import LeagueSettings, get_settings  # noqa: E402
from league.database import get_session  # noqa: E402
from league.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_CRON_SECRET = "test-cron-secret"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependencies overridden to use test_engine and test settings
# 5. Tables dropped and recreated per test so ids and data never leak
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


def override_get_settings() -> LeagueSettings:
    return LeagueSettings(cron_secret=TEST_CRON_SECRET)


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a freshly created schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from league.models.category import Category  # noqa: F401
    from league.models.match import Match  # noqa: F401
    from league.models.player import Player  # noqa: F401
    from league.models.round import Round  # noqa: F401
    from league.models.standing import Standing  # noqa: F401

    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="cron_secret")
def cron_secret_fixture() -> str:
    return TEST_CRON_SECRET


@pytest.fixture(name="settings")
def settings_fixture() -> LeagueSettings:
    return override_get_settings()


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session and settings

    Overrides MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = override_get_settings

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Data helpers
# ============================================================================


@pytest.fixture(name="make_category")
def make_category_fixture(session: Session):
    from league.models.category import Category

    def _make(name: str = "Primera", season_year: int = 2025, display_order: int = 0) -> Category:
        category = Category(name=name, season_year=season_year, display_order=display_order)
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    return _make


@pytest.fixture(name="make_players")
def make_players_fixture(session: Session):
    """Create players in a category. Names are (first, last) tuples."""
    from league.models.player import Player, PlayerStatus

    def _make(category_id: int, names, status: PlayerStatus = PlayerStatus.active):
        players = []
        for first, last in names:
            player = Player(
                first_name=first,
                last_name=last,
                email=f"{first.lower()}.{last.lower()}@example.com",
                status=status.value,
                initial_category_id=category_id,
                current_category_id=category_id,
            )
            session.add(player)
            players.append(player)
        session.commit()
        for player in players:
            session.refresh(player)
        return players

    return _make


FOUR_NAMES = [("Ana", "Alvarez"), ("Bruno", "Benitez"), ("Carla", "Castro"), ("Diego", "Diaz")]

SEASON_START = date(2025, 3, 1)


@pytest.fixture(name="league_with_fixture")
def league_with_fixture_fixture(session: Session, settings: LeagueSettings, make_category, make_players):
    """Category with four active players and a generated fixture (3 rounds x 2 matches)."""
    from league.services.schedule_generator import generate_fixture

    category = make_category()
    players = make_players(category.id, FOUR_NAMES)
    summary = generate_fixture(session, category.id, SEASON_START, round_length_days=15, settings=settings)
    return {"category": category, "players": players, "summary": summary}
