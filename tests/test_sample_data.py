"""Tests for the sample data generator and environment initializer."""
import pytest

from app.core.exceptions import DuplicateDocumentError
from app.services.sample_data import SampleDataGenerator, SampleDataInitializer
from app.services.sync.orchestrator import SyncOrchestrator

MAN_UTD_VS_LIVERPOOL = "90a1b2c3d4e5f6789abcdef0"
BARCELONA_VS_REAL = "90a1b2c3d4e5f6789abcdef1"


class TestSampleDataGenerator:
    """Tests for the fixed sample data set."""

    def test_base_data_set(self):
        """Should build four teams, three competitions, three seasons, two games, three players."""
        generator = SampleDataGenerator()
        teams = generator.generate_teams()
        competitions = generator.generate_competitions()
        seasons = generator.generate_seasons()

        games = generator.generate_games(teams, competitions, seasons)
        players = generator.generate_players(teams)

        assert [t.name for t in teams] == ["Manchester United", "Liverpool", "Barcelona", "Real Madrid"]
        assert [c.code for c in competitions] == ["EPL", "ESP1", "UCL"]
        assert [s.is_active for s in seasons] == [True, False, False]
        assert [g.id for g in games] == [MAN_UTD_VS_LIVERPOOL, BARCELONA_VS_REAL]
        assert len(players) == 3

    def test_games_reference_generated_documents(self):
        """Should point game references at the generated ids."""
        generator = SampleDataGenerator()
        teams = generator.generate_teams()
        competitions = generator.generate_competitions()
        seasons = generator.generate_seasons()

        game = generator.generate_games(teams, competitions, seasons)[0]

        assert game.home_team.id == teams[0].id
        assert game.away_team.id == teams[1].id
        assert game.competition.code == "EPL"
        assert game.season.name == "2023-24"
        assert (game.home_score, game.away_score) == (2, 1)

    def test_additional_games_need_seven_teams(self):
        """Should not build the extra games without the extra teams."""
        generator = SampleDataGenerator()

        games = generator.generate_additional_games(
            generator.generate_teams(),
            generator.generate_competitions(),
            generator.generate_seasons(),
        )

        assert games == []


class TestSampleDataInitializer:
    """Tests for seeding environments."""

    @pytest.mark.asyncio
    async def test_production_and_local_contents(self, empty_store):
        """Should give Production the full set and Local a subset."""
        results = await SampleDataInitializer(empty_store).initialize()

        assert results["Production"] == {
            "teams": 7, "competitions": 3, "seasons": 3, "games": 4, "players": 5,
        }
        assert results["Local"] == {
            "teams": 2, "competitions": 3, "seasons": 3, "games": 1, "players": 3,
        }
        assert await empty_store.find_one("games", BARCELONA_VS_REAL, "Local") is None

    @pytest.mark.asyncio
    async def test_initialize_skips_seeded_environments(self, sample_store):
        """Should not seed an environment twice."""
        initializer = SampleDataInitializer(sample_store)

        assert await initializer.is_initialized("Production")
        assert await initializer.initialize() == {}

    @pytest.mark.asyncio
    async def test_initialize_environment_twice_rejected(self, sample_store):
        """Should refuse to insert the same sample ids again."""
        with pytest.raises(DuplicateDocumentError):
            await SampleDataInitializer(sample_store).initialize_environment("Local")

    @pytest.mark.asyncio
    async def test_sync_sample_game_into_local(self, sample_store):
        """Should sync the La Liga game and its references into Local."""
        orchestrator = SyncOrchestrator(sample_store)

        report = await orchestrator.sync_game(BARCELONA_VS_REAL, "Production", "Local")

        assert report.per_collection_counts == {
            "competitions": 1,
            "seasons": 1,
            "teams": 2,
            "games": 1,
        }
        local_teams = await sample_store.get_all("teams", "Local")
        assert len(local_teams) == 4
