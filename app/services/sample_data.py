"""
Sample football data for demos and local development.

Production gets the full data set plus a few extra teams, games and
players. Local starts with a small subset so there is something to sync
into and something already there.

Ids are fixed so the same game can be referenced across restarts:
    Manchester United vs Liverpool  90a1b2c3d4e5f6789abcdef0  (in both)
    Barcelona vs Real Madrid        90a1b2c3d4e5f6789abcdef1  (Production only)
"""
import logging
from datetime import date, datetime
from typing import Dict, List

from app.models.documents import (
    BasicMonikerRef,
    Competition,
    CompetitionType,
    DocumentRef,
    Game,
    Player,
    Season,
    Team,
    TeamRef,
)
from app.services.store.base import DocumentStore

logger = logging.getLogger(__name__)

PRODUCTION = "Production"
LOCAL = "Local"


def team_ref(team: Team) -> TeamRef:
    return TeamRef(id=team.id, name=team.name, short_name=team.short_name, country=team.country)


def moniker_ref(document) -> BasicMonikerRef:
    return BasicMonikerRef(id=document.id, name=document.name, code=document.code)


class SampleDataGenerator:
    """Builds the fixed sample data set. Each call returns fresh objects."""

    def generate_teams(self) -> List[Team]:
        return [
            Team(
                id="60a1b2c3d4e5f6789abcdef0",
                name="Manchester United",
                short_name="Man Utd",
                full_name="Manchester United Football Club",
                country="England",
                city="Manchester",
                stadium="Old Trafford",
                founded=date(1878, 1, 1),
                colors=["Red", "White"],
                logo_url="https://example.com/logos/manutd.png",
            ),
            Team(
                id="60a1b2c3d4e5f6789abcdef1",
                name="Liverpool",
                short_name="Liverpool",
                full_name="Liverpool Football Club",
                country="England",
                city="Liverpool",
                stadium="Anfield",
                founded=date(1892, 1, 1),
                colors=["Red", "White"],
                logo_url="https://example.com/logos/liverpool.png",
            ),
            Team(
                id="60a1b2c3d4e5f6789abcdef2",
                name="Barcelona",
                short_name="Barca",
                full_name="Futbol Club Barcelona",
                country="Spain",
                city="Barcelona",
                stadium="Camp Nou",
                founded=date(1899, 1, 1),
                colors=["Blue", "Red"],
                logo_url="https://example.com/logos/barcelona.png",
            ),
            Team(
                id="60a1b2c3d4e5f6789abcdef3",
                name="Real Madrid",
                short_name="Real",
                full_name="Real Madrid Club de Futbol",
                country="Spain",
                city="Madrid",
                stadium="Santiago Bernabeu",
                founded=date(1902, 1, 1),
                colors=["White"],
                logo_url="https://example.com/logos/realmadrid.png",
            ),
        ]

    def generate_competitions(self) -> List[Competition]:
        return [
            Competition(
                id="70a1b2c3d4e5f6789abcdef0",
                name="Premier League",
                short_name="PL",
                code="EPL",
                country="England",
                type=CompetitionType.LEAGUE,
            ),
            Competition(
                id="70a1b2c3d4e5f6789abcdef1",
                name="La Liga",
                short_name="La Liga",
                code="ESP1",
                country="Spain",
                type=CompetitionType.LEAGUE,
            ),
            Competition(
                id="70a1b2c3d4e5f6789abcdef2",
                name="Champions League",
                short_name="UCL",
                code="UCL",
                country="Europe",
                type=CompetitionType.CUP,
            ),
        ]

    def generate_seasons(self) -> List[Season]:
        return [
            Season(
                id="80a1b2c3d4e5f6789abcdef0",
                name="2023-24",
                code="2023-24",
                start_date=date(2023, 8, 1),
                end_date=date(2024, 5, 31),
                is_active=True,
            ),
            Season(
                id="80a1b2c3d4e5f6789abcdef1",
                name="2024-25",
                code="2024-25",
                start_date=date(2024, 8, 1),
                end_date=date(2025, 5, 31),
            ),
            Season(
                id="80a1b2c3d4e5f6789abcdef2",
                name="2022-23",
                code="2022-23",
                start_date=date(2022, 8, 1),
                end_date=date(2023, 5, 31),
            ),
        ]

    def generate_games(
        self,
        teams: List[Team],
        competitions: List[Competition],
        seasons: List[Season]
    ) -> List[Game]:
        premier_league = next((c for c in competitions if c.code == "EPL"), None)
        la_liga = next((c for c in competitions if c.code == "ESP1"), None)
        current_season = next((s for s in seasons if s.is_active), None)
        if premier_league is None or la_liga is None or current_season is None or len(teams) < 4:
            return []

        return [
            Game(
                id="90a1b2c3d4e5f6789abcdef0",
                date=datetime(2024, 1, 15),
                home_team=team_ref(teams[0]),
                away_team=team_ref(teams[1]),
                competition=moniker_ref(premier_league),
                season=moniker_ref(current_season),
                venue=teams[0].stadium,
                home_score=2,
                away_score=1,
            ),
            Game(
                id="90a1b2c3d4e5f6789abcdef1",
                date=datetime(2024, 1, 22),
                home_team=team_ref(teams[2]),
                away_team=team_ref(teams[3]),
                competition=moniker_ref(la_liga),
                season=moniker_ref(current_season),
                venue=teams[2].stadium,
            ),
        ]

    def generate_players(self, teams: List[Team]) -> List[Player]:
        players = []
        if len(teams) > 0:
            players.extend([
                Player(
                    id="50a1b2c3d4e5f6789abcdef0",
                    first_name="Marcus",
                    last_name="Rashford",
                    date_of_birth=date(1997, 10, 31),
                    country="England",
                    position="Forward",
                    jersey_number=10,
                    current_team=DocumentRef(id=teams[0].id),
                ),
                Player(
                    id="50a1b2c3d4e5f6789abcdef1",
                    first_name="Bruno",
                    last_name="Fernandes",
                    date_of_birth=date(1994, 9, 8),
                    country="Portugal",
                    position="Midfielder",
                    jersey_number=18,
                    current_team=DocumentRef(id=teams[0].id),
                ),
            ])
        if len(teams) > 1:
            players.append(
                Player(
                    id="50a1b2c3d4e5f6789abcdef2",
                    first_name="Mohamed",
                    last_name="Salah",
                    date_of_birth=date(1992, 6, 15),
                    country="Egypt",
                    position="Forward",
                    jersey_number=11,
                    current_team=DocumentRef(id=teams[1].id),
                )
            )
        return players

    # Production-only extras

    def generate_additional_teams(self) -> List[Team]:
        return [
            Team(
                id="60a1b2c3d4e5f6789abcdef4",
                name="Chelsea",
                short_name="Chelsea",
                full_name="Chelsea Football Club",
                country="England",
                city="London",
                stadium="Stamford Bridge",
                founded=date(1905, 1, 1),
                colors=["Blue", "White"],
            ),
            Team(
                id="60a1b2c3d4e5f6789abcdef5",
                name="Arsenal",
                short_name="Arsenal",
                full_name="Arsenal Football Club",
                country="England",
                city="London",
                stadium="Emirates Stadium",
                founded=date(1886, 1, 1),
                colors=["Red", "White"],
            ),
            Team(
                id="60a1b2c3d4e5f6789abcdef6",
                name="Bayern Munich",
                short_name="Bayern",
                full_name="FC Bayern München",
                country="Germany",
                city="Munich",
                stadium="Allianz Arena",
                founded=date(1900, 1, 1),
                colors=["Red", "White"],
            ),
        ]

    def generate_additional_games(
        self,
        teams: List[Team],
        competitions: List[Competition],
        seasons: List[Season]
    ) -> List[Game]:
        """Needs the base teams followed by the additional teams (7 in total)."""
        if len(teams) < 7:
            return []

        premier_league = next((c for c in competitions if c.code == "EPL"), None)
        champions_league = next((c for c in competitions if c.code == "UCL"), None)
        current_season = next((s for s in seasons if s.is_active), None)
        if current_season is None:
            return []

        games = []
        if premier_league is not None:
            # Chelsea vs Arsenal
            games.append(Game(
                id="90a1b2c3d4e5f6789abcdef2",
                date=datetime(2024, 2, 1),
                home_team=team_ref(teams[4]),
                away_team=team_ref(teams[5]),
                competition=moniker_ref(premier_league),
                season=moniker_ref(current_season),
                venue=teams[4].stadium,
                home_score=1,
                away_score=2,
            ))
        if champions_league is not None:
            # Bayern Munich vs Manchester United
            games.append(Game(
                id="90a1b2c3d4e5f6789abcdef3",
                date=datetime(2024, 3, 15),
                home_team=team_ref(teams[6]),
                away_team=team_ref(teams[0]),
                competition=moniker_ref(champions_league),
                season=moniker_ref(current_season),
                venue=teams[6].stadium,
                home_score=2,
                away_score=3,
            ))
        return games

    def generate_additional_players(self, teams: List[Team]) -> List[Player]:
        players = []
        if len(teams) >= 5:
            players.append(Player(
                id="50a1b2c3d4e5f6789abcdef3",
                first_name="Raheem",
                last_name="Sterling",
                date_of_birth=date(1994, 12, 8),
                country="England",
                position="Winger",
                jersey_number=17,
                current_team=DocumentRef(id=teams[4].id),
            ))
        if len(teams) >= 6:
            players.append(Player(
                id="50a1b2c3d4e5f6789abcdef4",
                first_name="Bukayo",
                last_name="Saka",
                date_of_birth=date(2001, 9, 5),
                country="England",
                position="Winger",
                jersey_number=7,
                current_team=DocumentRef(id=teams[5].id),
            ))
        return players


class SampleDataInitializer:
    """Loads sample data into the environments of a store."""

    def __init__(self, store: DocumentStore, generator: SampleDataGenerator = None):
        self.store = store
        self.generator = generator or SampleDataGenerator()

    def build_environment_data(self, environment: str) -> Dict[str, list]:
        """
        Documents to insert into `environment`, keyed by collection.

        Args:
            environment: "Production" gets the full set plus extras, "Local"
                gets 2 teams, 1 game and 3 players, anything else the base set

        Returns:
            Dict of collection name -> documents
        """
        generator = self.generator
        teams = generator.generate_teams()
        competitions = generator.generate_competitions()
        seasons = generator.generate_seasons()
        games = generator.generate_games(teams, competitions, seasons)
        players = generator.generate_players(teams)

        if environment == PRODUCTION:
            teams.extend(generator.generate_additional_teams())
            games.extend(generator.generate_additional_games(teams, competitions, seasons))
            players.extend(generator.generate_additional_players(teams))
        elif environment == LOCAL:
            teams = teams[:2]
            games = games[:1]
            players = players[:3]

        return {
            "teams": teams,
            "competitions": competitions,
            "seasons": seasons,
            "games": games,
            "players": players,
        }

    async def initialize_environment(self, environment: str) -> Dict[str, int]:
        """
        Insert sample data into one environment.

        Raises:
            DuplicateDocumentError: if the environment already holds a sample id
        """
        logger.debug(f"Initializing {environment} environment with sample data")

        counts = {}
        for collection, documents in self.build_environment_data(environment).items():
            counts[collection] = await self.store.insert_many(collection, documents, environment)

        logger.info(
            f"✓ Initialized {environment} with "
            + ", ".join(f"{count} {collection}" for collection, count in counts.items())
        )
        return counts

    async def initialize(self) -> Dict[str, Dict[str, int]]:
        """Seed every environment of the store that has no teams yet."""
        logger.info("Initializing sample data for all environments")

        results = {}
        for environment in self.store.list_environments():
            if await self.is_initialized(environment):
                logger.info(f"{environment} already has data, skipping")
                continue
            results[environment] = await self.initialize_environment(environment)

        logger.info("Completed initialization of all environments")
        return results

    async def is_initialized(self, environment: str) -> bool:
        """True if the environment already holds at least one team."""
        teams = await self.store.get_all("teams", environment)
        return len(teams) > 0


async def initialize_environments(store: DocumentStore) -> Dict[str, Dict[str, int]]:
    """Seed a store with sample data. Returns per-environment insert counts."""
    return await SampleDataInitializer(store).initialize()
