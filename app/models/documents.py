"""
Document models for every syncable entity kind.

Documents are identified by an opaque string `id` that is unique within
(environment, collection) and is copied verbatim between environments.
References are lightweight pointers (id + a denormalized display snapshot)
and never imply ownership.

Unknown fields are kept (extra="allow") so a document read from one
environment can be written to another without losing data.
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """Base class for anything stored in a collection."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str


class DocumentRef(BaseModel):
    """Pointer to a document living in another collection."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None

    @classmethod
    def to(cls, document: Optional[Document], **snapshot) -> Optional["DocumentRef"]:
        """Build a reference to `document`, or None when there is nothing to point at."""
        if document is None:
            return None
        return cls(id=document.id, **snapshot)


class TeamRef(DocumentRef):
    """Team reference with the display fields captured when the game was created."""

    name: str = ""
    short_name: str = ""
    country: str = ""
    logo_url: str = ""


class BasicMonikerRef(DocumentRef):
    """Reference carrying a display name and short code (competition, season, league)."""

    name: str = ""
    code: str = ""


class SyncMetadata(BaseModel):
    """Provenance stamped onto a document each time it is copied."""

    last_synced: Optional[datetime] = None
    source_environment: str = ""
    synced_by: str = ""
    sync_version: int = 1
    # "collection/id" entries copied together with a root document
    dependencies_synced: List[str] = Field(default_factory=list)


class CompetitionType(str, Enum):
    LEAGUE = "League"
    CUP = "Cup"
    TOURNAMENT = "Tournament"
    FRIENDLY = "Friendly"
    INTERNATIONAL = "International"


class Game(Document):
    home_team: Optional[TeamRef] = None
    away_team: Optional[TeamRef] = None
    competition: Optional[BasicMonikerRef] = None
    league: Optional[BasicMonikerRef] = None
    season: Optional[BasicMonikerRef] = None

    date: Optional[datetime] = None
    venue: str = ""
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    events: List[DocumentRef] = Field(default_factory=list)

    sync_info: Optional[SyncMetadata] = None

    @property
    def has_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None


class Team(Document):
    name: str = ""
    short_name: str = ""
    full_name: str = ""
    country: str = ""
    city: str = ""
    logo_url: str = ""
    founded: Optional[date] = None
    stadium: str = ""
    colors: List[str] = Field(default_factory=list)

    players: List[DocumentRef] = Field(default_factory=list)
    competitions: List[DocumentRef] = Field(default_factory=list)

    sync_info: Optional[SyncMetadata] = None


class Competition(Document):
    name: str = ""
    short_name: str = ""
    code: str = ""
    country: str = ""
    type: CompetitionType = CompetitionType.LEAGUE

    seasons: List[DocumentRef] = Field(default_factory=list)
    participating_teams: List[DocumentRef] = Field(default_factory=list)

    sync_info: Optional[SyncMetadata] = None


class Season(Document):
    name: str = ""
    code: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = False

    # Informational only, not followed by the resolver
    teams: List[DocumentRef] = Field(default_factory=list)
    games: List[DocumentRef] = Field(default_factory=list)

    sync_info: Optional[SyncMetadata] = None


class Player(Document):
    first_name: str = ""
    last_name: str = ""
    date_of_birth: Optional[date] = None
    country: str = ""
    position: str = ""
    jersey_number: Optional[int] = None

    current_team: Optional[DocumentRef] = None

    sync_info: Optional[SyncMetadata] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class League(Document):
    """Referenced by games; no data set in this service ships any."""

    name: str = ""
    code: str = ""
    country: str = ""

    sync_info: Optional[SyncMetadata] = None
