from fastapi import APIRouter, HTTPException, Query

from league.services.match_scheduler import InvalidPoolSizeError, match_to_dict, schedule, schedule_finale

router = APIRouter()


@router.get("/pool-schedules/{pool_size}")
def get_pool_schedule(pool_size: int, finale: bool = Query(False)):
    """Match template for a pool size; slots are 1-based positions within the pool"""
    try:
        matches = schedule_finale(pool_size) if finale else schedule(pool_size)
    except InvalidPoolSizeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"pool_size": pool_size, "finale": finale, "matches": [match_to_dict(m) for m in matches]}
