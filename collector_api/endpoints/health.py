"""Health endpoint del collector."""

from fastapi import APIRouter, Depends

from ..dependencies import get_store, get_sweeper
from ..schemas import HealthOut
from ..snapshots import EvictionSweeper, SnapshotStore

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
def health(
    store: SnapshotStore = Depends(get_store),
    sweeper: EvictionSweeper = Depends(get_sweeper),
):
    """Liveness: ok mientras el proceso esté vivo."""
    return HealthOut(
        instances=len(store),
        sweeper_running=sweeper.is_running,
        sweeper=sweeper.get_stats(),
    )
