"""
FastAPI Router — Auth • Profiles • Interest • Wallet • Checkout • AI Match
=========================================================================

Purpose
-------
Defines the HTTP API for:
- Authentication: register, login, logout, current user
- Profiles: fetch, save, needed skills, browse, swipe candidates
- Interest: swipes, connection requests (send, list, accept/reject)
- Wallet balance and credit top-ups through the payment processor
- AI-assisted skill matching
- The expiry sweep trigger used by the external scheduler

Key Notes
---------
- Input validation via Pydantic models in `bartr.api.models`.
- Auth: JWT in the `token` cookie (set at login) or an `Authorization: Bearer`
  header, resolved by `get_current_user_id`.
- Business rules live in `bartr.database.core`; handlers translate HTTP to
  service calls and publish realtime events after a successful commit.
  Publishing handlers are coroutines that run the service in the threadpool.
- Errors are raised as `BartrError` subclasses and rendered as
  ``{"error", "details"}`` by the handlers in `bartr.api.errors`.
"""

import hmac
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response
from starlette.concurrency import run_in_threadpool

from bartr.api.ai_match import SkillMatcher
from bartr.api.errors import AuthenticationRequired
from bartr.api.events import broker, notify_credits, notify_match, user_topic
from bartr.api.models import (
    CheckoutRequest,
    NeededSkills,
    NewRequest,
    ProfileDetails,
    RequestAction,
    SwipeDetails,
    UserCredentials,
    UserData,
)
from bartr.api.utils import create_access_token, get_current_user_id
from bartr.database.config.config import settings
from bartr.database.core.accounts import (
    browse_users,
    get_profile,
    login_user,
    register_user,
    save_needed_skills,
    save_profile,
    skill_match_inputs,
    swipe_candidates,
)
from bartr.database.core.checkout import start_checkout, verify_checkout
from bartr.database.core.expiry import sweep_expired_matches
from bartr.database.core.interest import list_requests, record_interest, resolve_request, send_request
from bartr.database.core.wallet import get_wallet_balance

logger = logging.getLogger(__name__)

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""


# -----------------------
# Auth
# -----------------------
@router.post('/register')
def register(data: UserData):
    """Register a new user account with an empty profile and 0 credits."""
    user = register_user(name=data.name, email=data.email, password=data.password)
    return {"success": True, "user": user}


@router.post('/login')
def login(data: UserCredentials, response: Response):
    """Authenticate a user and set a signed JWT cookie.

    Request body:
        UserCredentials {email, password}

    Response:
        200: {'user_details': {...}, 'access_token': str}
        401: wrong email or password
    """
    user = login_user(email=data.email, password=data.password)
    access_token = create_access_token({'sub': user['id']})
    response.set_cookie(
        key="token",
        value=access_token,
        httponly=True,
        secure=False,  # True in production
        samesite="lax",
    )
    return {'user_details': user, 'access_token': access_token}


@router.post('/logout')
async def logout(response: Response):
    """Logout by clearing the auth cookie `token`."""
    response.delete_cookie(key="token")
    return True


@router.get('/get_user')
def get_user(user_id: UUID = Depends(get_current_user_id)):
    """Return the authenticated user's own profile (including email and credits)."""
    return get_profile(user_id=user_id)


# -----------------------
# Profiles & discovery
# -----------------------
@router.get('/api/profile')
def profile(user_id: UUID = Depends(get_current_user_id)):
    return get_profile(user_id=user_id)


@router.post('/api/saveProfile')
def save_profile_route(data: ProfileDetails, user_id: UUID = Depends(get_current_user_id)):
    """Overwrite the caller's profile. `userId` must be the caller."""
    saved = save_profile(
        actor_id=user_id,
        user_id=data.userId,
        name=data.name,
        bio=data.bio,
        location=data.location,
        timezone=data.timezone,
        offered_skills=data.offeredSkills,
        needed_skills=data.neededSkills,
    )
    return {"success": True, "profile": saved}


@router.post('/api/saveNeededSkills')
def save_needed_skills_route(data: NeededSkills, user_id: UUID = Depends(get_current_user_id)):
    saved = save_needed_skills(actor_id=user_id, skills_needed=data.skillsNeeded)
    return {"success": True, "profile": saved}


@router.get('/api/browse-users')
def browse(user_id: UUID = Depends(get_current_user_id)):
    return browse_users(actor_id=user_id)


@router.get('/api/swipe')
def swipe_deck(user_id: UUID = Depends(get_current_user_id)):
    """Members the caller has not swiped on yet."""
    return swipe_candidates(actor_id=user_id)


# -----------------------
# Interest: swipes and requests
# -----------------------
@router.post('/api/swipe')
async def swipe(data: SwipeDetails, user_id: UUID = Depends(get_current_user_id)):
    """Record a like/skip.

    Response:
        mutual mode:  {success, matchCreated, match}
        request mode: {success, pendingRequestCreated, request}
    """
    result = await run_in_threadpool(
        record_interest, actor_id=user_id, target_id=data.swipedUserId, direction=data.direction
    )
    if result.get("matchCreated"):
        notify_match(result["match"], "match.created")
    if result.get("pendingRequestCreated"):
        broker.publish(user_topic(data.swipedUserId), "request.created", result["request"])
    return result


@router.post('/api/requests/send')
async def send_request_route(data: NewRequest, user_id: UUID = Depends(get_current_user_id)):
    result = await run_in_threadpool(send_request, actor_id=user_id, receiver_id=data.receiverId)
    if result["created"]:
        broker.publish(user_topic(data.receiverId), "request.created", result["request"])
    return result


@router.get('/api/requests')
def get_requests(list_type: str = Query('incoming', alias='type'), user_id: UUID = Depends(get_current_user_id)):
    """Pending requests received (`incoming`) or sent (`pending`) by the caller."""
    return list_requests(actor_id=user_id, list_type=list_type)


@router.post('/api/requests')
async def resolve_request_route(data: RequestAction, user_id: UUID = Depends(get_current_user_id)):
    """Accept or reject an incoming request; accepting creates the match."""
    result = await run_in_threadpool(
        resolve_request, actor_id=user_id, request_id=data.requestId, action=data.action
    )
    broker.publish_to_users(
        (result["senderId"], result["receiverId"]),
        "request.updated",
        {"requestId": str(data.requestId), "status": result["status"]},
    )
    if result["matchCreated"]:
        notify_match(result["match"], "match.created")
    return result


# -----------------------
# AI match
# -----------------------
@router.post('/api/aiMatch')
def ai_match(user_id: UUID = Depends(get_current_user_id)):
    """Ranked providers for the caller's needed skills."""
    inputs = skill_match_inputs(actor_id=user_id)
    return SkillMatcher().rank(str(user_id), inputs["skillsNeeded"], inputs["providers"])


# -----------------------
# Wallet & checkout
# -----------------------
@router.get('/api/wallet')
def wallet(user_id: UUID = Depends(get_current_user_id)):
    return get_wallet_balance(user_id=user_id)


@router.post('/api/checkout_sessions')
def checkout_session(data: CheckoutRequest, user_id: UUID = Depends(get_current_user_id)):
    """Open a hosted checkout page; returns {url, sessionId}."""
    return start_checkout(user_id, data.amount)


@router.get('/api/checkout/verify')
async def checkout_verify(session_id: Optional[str] = None, user_id: UUID = Depends(get_current_user_id)):
    """Credit a completed checkout session (once)."""
    result = await run_in_threadpool(verify_checkout, user_id, session_id)
    if result.get("status") == "complete" and not result.get("alreadyProcessed"):
        notify_credits(user_id, result["balance"])
    return result


# -----------------------
# Scheduled jobs
# -----------------------
@router.post('/api/jobs/expire-matches')
def expire_matches(x_job_secret: Optional[str] = Header(None)):
    """Run the expiry sweep. Requires the `X-Job-Secret` header."""
    if not settings.JOB_SECRET or not x_job_secret or not hmac.compare_digest(x_job_secret, settings.JOB_SECRET):
        raise AuthenticationRequired("Invalid job secret")
    return sweep_expired_matches()
