from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response
from pydantic import BaseModel

from curalink.api.dependencies import SESSION_COOKIE, current_principal, session_token
from curalink.application.services.account_service import AccountService, session_ttl
from curalink.application.services.resend_service import ResendEmailService
from curalink.domain.identity import Principal
from curalink.utils.logging_config import LogFiles, Logger

router = APIRouter()

_account_service = AccountService(mailer=ResendEmailService.from_env())


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    userType: Optional[str] = None


class EmailRequest(BaseModel):
    email: Optional[str] = None


class SignInRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserTypeRequest(BaseModel):
    userType: Optional[str] = None


class OAuthProfileRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    orcidId: Optional[str] = None


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=int(session_ttl().total_seconds()),
        httponly=True,
        samesite="lax",
    )


@router.post("/auth/register")
def register(req: RegisterRequest):
    user = _account_service.register(
        name=req.name or "",
        email=req.email or "",
        password=req.password or "",
        role=req.userType,
    )
    Logger.info(f"Registered user {user['id']}", file=LogFiles.AUTH)
    return {
        "message": "Registration successful. Please check your email to verify your account.",
        "user": user,
    }


@router.get("/auth/verify")
def verify_email(token: Optional[str] = Query(None)):
    return _account_service.verify_email(token or "")


@router.post("/auth/resend-verification")
def resend_verification(req: EmailRequest):
    return _account_service.resend_verification(req.email or "")


@router.post("/auth/signin")
def sign_in(req: SignInRequest, response: Response):
    result = _account_service.sign_in(email=req.email or "", password=req.password or "")
    _set_session_cookie(response, result["token"])
    Logger.info(f"User {result['user']['id']} signed in", file=LogFiles.AUTH)
    return result


@router.post("/auth/oauth/callback")
def oauth_callback(
    req: OAuthProfileRequest,
    response: Response,
    x_oauth_callback_secret: Optional[str] = Header(None),
):
    """Called by the identity-provider callback once it has verified the profile."""
    result = _account_service.oauth_sign_in(
        secret=x_oauth_callback_secret,
        email=req.email or "",
        name=req.name,
        image=req.image,
        orcid_id=req.orcidId,
    )
    _set_session_cookie(response, result["token"])
    Logger.info(f"User {result['user']['id']} signed in via OAuth", file=LogFiles.AUTH)
    return result


@router.post("/auth/signout")
def sign_out(response: Response, token: Optional[str] = Depends(session_token)):
    _account_service.sign_out(token)
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@router.get("/auth/me")
def me(principal: Principal = Depends(current_principal)):
    return {"user": _account_service.current_user(principal)}


@router.post("/auth/update-usertype")
def update_user_type(req: UserTypeRequest, principal: Principal = Depends(current_principal)):
    user = _account_service.select_role(principal, req.userType)
    Logger.info(f"User {principal.user_id} selected role {user['role']}", file=LogFiles.AUTH)
    return {"success": True, "user": user}
