"""
app/api/analytics.py

Purpose: Analytics and navigation endpoints

- Dashboard summary figures
- Product report for the reports page
- Sidebar entries visible to the signed-in role
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_access_policy, get_record_store, require_identity, require_route
from app.models.identity import Identity
from app.services.access_service import AccessPolicy
from app.services.analytics_service import dashboard_summary, product_report
from app.services.record_service import RecordStore

router = APIRouter()


@router.get("/analytics/summary", dependencies=[Depends(require_route("/dashboard"))])
async def summary(store: RecordStore = Depends(get_record_store)):
    return dashboard_summary(store)


@router.get("/analytics/reports", dependencies=[Depends(require_route("/dashboard/reports"))])
async def reports(store: RecordStore = Depends(get_record_store)):
    return product_report(store)


@router.get("/navigation")
async def navigation(
    identity: Identity = Depends(require_identity),
    policy: AccessPolicy = Depends(get_access_policy),
):
    return {
        "role": identity.role.value,
        "items": policy.navigation_for(identity.role),
    }
