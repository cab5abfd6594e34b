from fastapi import APIRouter

from agency_admin.api.v1.health import router as health_router
from agency_admin.api.v1.auth import router as auth_router

from agency_admin.api.v1.accounts import router as accounts_router
from agency_admin.api.v1.clients import router as clients_router
from agency_admin.api.v1.projects import router as projects_router
from agency_admin.api.v1.members import router as members_router

from agency_admin.api.v1.candidates import router as candidates_router
from agency_admin.api.v1.payment_links import router as payment_links_router
from agency_admin.api.v1.contacts import router as contacts_router

from agency_admin.api.v1.public import router as public_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(auth_router, tags=["auth"])

# ------------------------------------------------------------------
# ADMIN: ACCOUNTS / CLIENTS / PROJECTS
# ------------------------------------------------------------------
v1_router.include_router(accounts_router, tags=["accounts"])
v1_router.include_router(clients_router, tags=["clients"])
v1_router.include_router(projects_router, tags=["projects"])
v1_router.include_router(members_router, tags=["members"])

# ------------------------------------------------------------------
# ADMIN: LINKS / SUBMISSIONS / CONTACTS
# ------------------------------------------------------------------
v1_router.include_router(candidates_router, tags=["candidates"])
v1_router.include_router(payment_links_router, tags=["payment-links"])
v1_router.include_router(contacts_router, tags=["contacts"])

# ------------------------------------------------------------------
# PUBLIC (TOKEN LINKS, CONTACT FORM)
# ------------------------------------------------------------------
v1_router.include_router(public_router, tags=["public"])
