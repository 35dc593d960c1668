"""
app/api/pages.py

Purpose: Page views at the dashboard paths

- Landing, login and register views (public)
- Dashboard, users, products, reports and settings views
- Served as JSON view models; the route guard middleware runs first
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_access_policy, get_record_store, require_route
from app.core.config import settings
from app.models.identity import Identity
from app.schemas.auth import IdentityResponse
from app.schemas.query import ListOptions
from app.services.access_service import AccessPolicy
from app.services.analytics_service import dashboard_summary, product_report
from app.services.record_service import RecordStore

router = APIRouter(tags=["Pages"])


def page_view(name: str, identity: Identity, policy: AccessPolicy, **data) -> dict:
    return {
        "page": name,
        "user": IdentityResponse.from_identity(identity).model_dump(mode="json"),
        "navigation": policy.navigation_for(identity.role),
        **data,
    }


@router.get("/")
async def home():
    return {
        "page": "home",
        "links": {"login": "/auth/login", "register": "/auth/register"},
    }


@router.get("/auth/login")
async def login_page():
    return {"page": "login", "action": f"{settings.API_PREFIX}/auth/login", "fields": ["email", "password"]}


@router.get("/auth/register")
async def register_page():
    return {
        "page": "register",
        "action": f"{settings.API_PREFIX}/auth/register",
        "fields": ["name", "email", "password"],
    }


@router.get("/dashboard")
async def dashboard_page(
    identity: Identity = Depends(require_route("/dashboard")),
    policy: AccessPolicy = Depends(get_access_policy),
    store: RecordStore = Depends(get_record_store),
):
    return page_view("dashboard", identity, policy, summary=dashboard_summary(store))


@router.get("/dashboard/users")
async def users_page(
    q: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    identity: Identity = Depends(require_route("/dashboard/users")),
    policy: AccessPolicy = Depends(get_access_policy),
    store: RecordStore = Depends(get_record_store),
):
    result = store.list("users", ListOptions(search=q, page=page, page_size=settings.DEFAULT_PAGE_SIZE))
    return page_view("users", identity, policy, search=q, result=result.model_dump(mode="json"))


@router.get("/dashboard/products")
async def products_page(
    q: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    identity: Identity = Depends(require_route("/dashboard/products")),
    policy: AccessPolicy = Depends(get_access_policy),
    store: RecordStore = Depends(get_record_store),
):
    result = store.list("products", ListOptions(search=q, page=page, page_size=settings.DEFAULT_PAGE_SIZE))
    return page_view("products", identity, policy, search=q, result=result.model_dump(mode="json"))


@router.get("/dashboard/reports")
async def reports_page(
    identity: Identity = Depends(require_route("/dashboard/reports")),
    policy: AccessPolicy = Depends(get_access_policy),
    store: RecordStore = Depends(get_record_store),
):
    return page_view("reports", identity, policy, report=product_report(store))


@router.get("/dashboard/settings")
async def settings_page(
    identity: Identity = Depends(require_route("/dashboard/settings")),
    policy: AccessPolicy = Depends(get_access_policy),
):
    return page_view(
        "settings",
        identity,
        policy,
        actions={
            "update_profile": f"{settings.API_PREFIX}/auth/me",
            "change_password": f"{settings.API_PREFIX}/auth/me/password",
        },
    )
