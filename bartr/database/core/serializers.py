"""
Entity → response-dict conversion shared by the services.

Services hand plain dicts back to the routers (the session is closed by the
time the response is rendered), so every ORM row crossing that boundary goes
through one of these functions.
"""

from bartr.database.entities.matches import Match, Submission
from bartr.database.entities.messages import ChatMessage
from bartr.database.entities.swipes import PendingRequest
from bartr.database.entities.user import User


def _iso(value):
    return value.isoformat() if value is not None else None


def public_profile(user: User) -> dict:
    """Fields any member may see about another member."""
    return {
        "id": str(user.id),
        "name": user.user_name,
        "bio": user.bio,
        "location": user.location,
        "timezone": user.timezone,
        "skillsOffered": list(user.skills_offered or []),
        "skillsNeeded": list(user.skills_needed or []),
    }


def own_profile(user: User) -> dict:
    profile = public_profile(user)
    profile["email"] = user.email
    profile["credits"] = user.credits
    return profile


def match_to_dict(match: Match) -> dict:
    return {
        "id": str(match.id),
        "user1_id": str(match.user1_id),
        "user2_id": str(match.user2_id),
        "status": match.status,
        "created_at": _iso(match.created_on),
        "project_end_date": _iso(match.project_end_date),
        "stake_status_user1": match.stake_status_user1,
        "stake_status_user2": match.stake_status_user2,
        "is_chat_enabled": match.is_chat_enabled,
        "project_submitted_user1": match.project_submitted_user1,
        "project_submitted_user2": match.project_submitted_user2,
        "stake_amount": match.stake_amount,
        "completed_at": _iso(match.completed_on),
    }


def request_to_dict(request: PendingRequest, counterpart_key: str, counterpart: User | None) -> dict:
    return {
        "id": str(request.id),
        "status": request.status,
        "created_at": _iso(request.created_on),
        counterpart_key: public_profile(counterpart) if counterpart is not None else None,
    }


def message_to_dict(message: ChatMessage) -> dict:
    return {
        "id": str(message.id),
        "match_id": str(message.match_id),
        "sender_id": str(message.sender_id),
        "message": message.message_text,
        "file_url": message.file_url,
        "file_name": message.file_name,
        "timestamp": _iso(message.date_created_on),
    }


def submission_to_dict(submission: Submission) -> dict:
    return {
        "id": str(submission.id),
        "match_id": str(submission.match_id),
        "user_id": str(submission.user_id),
        "content": submission.content,
        "submitted_at": _iso(submission.submitted_on),
    }
