"""Live game detection, enrichment and game session persistence."""

from .orm_models import GameSessionORM
from .repository import GameRepositoryInterface, SQLAlchemyGameRepository
from .service import GameStateMachine, GameTransition, MatchDetailService
from .reconciler import StaleStateReconciler

__all__ = [
    "GameSessionORM",
    "GameRepositoryInterface",
    "SQLAlchemyGameRepository",
    "GameStateMachine",
    "GameTransition",
    "MatchDetailService",
    "StaleStateReconciler",
]
