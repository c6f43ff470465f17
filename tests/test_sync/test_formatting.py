"""Tests for the text renderings of sync results."""
from datetime import datetime

from app.models import BasicMonikerRef
from app.services.store.base import DatabaseStats, format_bytes
from app.services.sync import formatting
from app.services.sync.orchestrator import SyncReport

# Import helpers from conftest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import make_game


def make_report(**kwargs) -> SyncReport:
    defaults = dict(
        root_kind="game",
        root_id="g1",
        source_environment="Production",
        per_collection_counts={"competitions": 1, "seasons": 1, "teams": 2, "games": 1},
    )
    defaults.update(kwargs)
    return SyncReport(**defaults)


class TestFormatting:
    """Tests for message rendering."""

    def test_preview(self):
        """Should list per-collection counts and the total."""
        message = formatting.format_preview(make_report(dry_run=True))

        assert "Sync Preview for Game g1 from Production" in message
        assert "  • teams: 2 documents" in message
        assert "📊 Total: 5 documents" in message
        assert "preview only" in message

    def test_not_found(self):
        """Should render a not-found message for preview and commit."""
        report = make_report(not_found=True, per_collection_counts={})

        assert formatting.format_preview(report) == "❌ Game g1 not found in Production"
        assert formatting.format_commit(report) == "❌ Game g1 not found in Production"

    def test_commit(self):
        """Should summarize the commit with source and target."""
        message = formatting.format_commit(make_report(target_environment="Local"))

        assert message.startswith("✅ Game sync completed for g1")
        assert "Synced from Production to Local" in message
        assert "📊 Total: 5 documents synced" in message
        assert "Skipped" not in message

    def test_commit_lists_skipped_and_failed(self):
        """Should list skipped and failed ids by collection."""
        report = make_report(
            target_environment="Local",
            skipped={"leagues": ["l1"]},
            failed={"teams": ["t2", "t3"]},
        )

        message = formatting.format_commit(report)

        assert "  • leagues: l1" in message
        assert "  • teams: t2, t3" in message

    def test_commit_cancelled(self):
        """Should say the sync was cancelled."""
        message = formatting.format_commit(make_report(target_environment="Local", cancelled=True))

        assert "cancelled" in message.splitlines()[0]

    def test_games(self):
        """Should render date, teams, id, competition and score."""
        game = make_game(
            "g1", "Manchester United", "Liverpool", datetime(2024, 1, 15),
            competition=BasicMonikerRef(id="c1", name="Premier League"),
            home_score=2, away_score=1,
        )

        message = formatting.format_games([game], "Liverpool", "Production")

        assert "🔍 Found 1 games for 'Liverpool' in Production:" in message
        assert "📅 2024-01-15 - Manchester United vs Liverpool" in message
        assert "ID: g1 | Competition: Premier League | Score: 2-1" in message

    def test_games_empty(self):
        """Should say nothing was found."""
        message = formatting.format_games([], "Juventus", "Local")

        assert message == "❌ No games found for team 'Juventus' in Local"

    def test_stats(self):
        """Should render counts and human-readable sizes."""
        stats = DatabaseStats(
            environment="Local",
            database_name="InMemory_Local",
            collections=3,
            objects=1234,
            data_size=2048,
            storage_size=2048,
        )

        message = formatting.format_stats(stats)

        assert "Documents: 1,234" in message
        assert "Data Size: 2 KB" in message

    def test_stats_error(self):
        """Should render the stats error instead of numbers."""
        stats = DatabaseStats(environment="Staging", error="Environment not found")

        assert formatting.format_stats(stats) == (
            "❌ Error getting stats for Staging: Environment not found"
        )

    def test_format_bytes(self):
        """Should scale to the largest whole unit."""
        assert format_bytes(0) == "0 B"
        assert format_bytes(1536) == "1.5 KB"
        assert format_bytes(3 * 1024 * 1024) == "3 MB"
