from app.models.tournament import TournamentStatus, normalize_status

__all__ = [
    "TournamentStatus",
    "normalize_status",
]
