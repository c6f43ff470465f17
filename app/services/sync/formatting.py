"""
Human-readable renderings of sync results.

Every API response and CLI script prints one of these alongside the
structured payload.
"""
from typing import List, Sequence

from app.models.documents import Game
from app.services.store.base import DatabaseStats
from app.services.sync.orchestrator import SyncReport


def format_not_found(report: SyncReport) -> str:
    return f"❌ {report.root_kind.capitalize()} {report.root_id} not found in {report.source_environment}"


def format_preview(report: SyncReport) -> str:
    if report.not_found:
        return format_not_found(report)

    lines = [
        f"🎯 Sync Preview for {report.root_kind.capitalize()} {report.root_id} "
        f"from {report.source_environment}:",
        "",
        "📋 Entities to be synced:",
    ]
    lines.extend(
        f"  • {collection}: {count} documents"
        for collection, count in report.per_collection_counts.items()
    )
    lines.append("")
    lines.append(f"📊 Total: {report.total_count} documents")
    lines.append("")
    lines.append("⚠️  This is a preview only. Commit the sync to copy the documents.")
    return "\n".join(lines)


def format_commit(report: SyncReport) -> str:
    if report.not_found:
        return format_not_found(report)

    heading = (
        f"⏹️  {report.root_kind.capitalize()} sync cancelled for {report.root_id}"
        if report.cancelled
        else f"✅ {report.root_kind.capitalize()} sync completed for {report.root_id}"
    )
    lines = [
        heading,
        "",
        f"📋 Synced from {report.source_environment} to {report.target_environment}:",
    ]
    lines.extend(
        f"  • {collection}: {count} documents"
        for collection, count in report.per_collection_counts.items()
    )
    lines.append("")
    lines.append(f"📊 Total: {report.total_count} documents synced")

    if report.skipped:
        lines.append("")
        lines.append("⚠️  Skipped (not found in source):")
        lines.extend(_format_id_groups(report.skipped))

    if report.failed:
        lines.append("")
        lines.append("❌ Failed:")
        lines.extend(_format_id_groups(report.failed))

    return "\n".join(lines)


def format_games(games: Sequence[Game], team_name: str, environment: str) -> str:
    if not games:
        return f"❌ No games found for team '{team_name}' in {environment}"

    lines = [f"🔍 Found {len(games)} games for '{team_name}' in {environment}:"]
    for game in games:
        day = game.date.strftime("%Y-%m-%d") if game.date else "unscheduled"
        home = game.home_team.name if game.home_team else "?"
        away = game.away_team.name if game.away_team else "?"
        competition = game.competition.name if game.competition else ""

        details = f"   ID: {game.id} | Competition: {competition}"
        if game.has_score:
            details += f" | Score: {game.home_score}-{game.away_score}"

        lines.append("")
        lines.append(f"📅 {day} - {home} vs {away}")
        lines.append(details)
    return "\n".join(lines)


def format_environments(environments: Sequence[str]) -> str:
    return f"Available environments: {', '.join(environments)}"


def format_connection(environment: str, connected: bool) -> str:
    if connected:
        return f"✅ Successfully connected to {environment}"
    return f"❌ Failed to connect to {environment}"


def format_stats(stats: DatabaseStats) -> str:
    if stats.error:
        return f"❌ Error getting stats for {stats.environment}: {stats.error}"

    return "\n".join([
        f"📊 Database Stats for {stats.environment}:",
        f"Database: {stats.database_name}",
        f"Collections: {stats.collections}",
        f"Documents: {stats.objects:,}",
        f"Data Size: {stats.format_data_size()}",
        f"Storage Size: {stats.format_storage_size()}",
    ])


def _format_id_groups(groups) -> List[str]:
    return [f"  • {collection}: {', '.join(ids)}" for collection, ids in groups.items()]
