"""Tenant team enrichment: lookup cache and its periodic refresh."""
from .cache import RefreshResult, TeamCache, build_team_map, extract_team
from .refresher import TeamRefresher

__all__ = ["TeamCache", "RefreshResult", "TeamRefresher", "build_team_map", "extract_team"]
