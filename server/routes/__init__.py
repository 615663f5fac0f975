from fastapi import APIRouter
from . import tasks, push, sync, cron, alert_state, prometheus

router = APIRouter()

router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(alert_state.router, tags=["Tasks"])
router.include_router(push.router, tags=["Push"])
router.include_router(sync.router, tags=["Push"])
router.include_router(cron.router, tags=["Cron"])
router.include_router(prometheus.router, prefix="/metrics", tags=["Metrics"])
