"""
Authentication routes.

Provides endpoints for:
- Coach and player registration
- Username/email + password login
- Token refresh
- Current user lookup
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from jwt.exceptions import InvalidTokenError

from league_api.auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
    verify_password
)
from league_api.database import get_store
from league_api.errors import LeagueError
from league_api.models.user import (
    RegisterRequest,
    RefreshTokenRequest,
    TokenResponse,
    UserLogin,
    UserResponse
)
from league_api.services import registration
from league_api.store import LeagueStore
from league_api.utils.audit_log import log_auth_event

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register")
async def register(
    body: RegisterRequest,
    request: Request,
    store: LeagueStore = Depends(get_store)
):
    """
    Register a coach or player account.

    Players also get a player row with no team; they join teams later
    through join requests.
    """
    try:
        result = await registration.register_account(store, body)
    except LeagueError as e:
        log_auth_event(
            event_type="register",
            user_id=None,
            username=body.username,
            success=False,
            request=request,
            details=e.message
        )
        raise

    log_auth_event(
        event_type="register",
        user_id=str(result["user"]["id"]),
        username=result["user"]["username"],
        success=True,
        request=request,
        details=f"role={result['user']['role']}"
    )
    return {"success": True, "message": result["message"]}


@router.post("/login", response_model=TokenResponse)
async def login(
    body: UserLogin,
    request: Request,
    store: LeagueStore = Depends(get_store)
):
    """Authenticate with username (or email) and password."""
    user = await store.find_user_for_login(body.username)

    if not user or not verify_password(body.password, user["password_hash"]):
        log_auth_event(
            event_type="login",
            user_id=str(user["id"]) if user else None,
            username=body.username,
            success=False,
            request=request,
            details="Invalid password" if user else "User not found"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario o contraseña incorrectos"
        )

    if user["status"] == "suspended":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cuenta suspendida"
        )

    await store.touch_last_login(user["id"])

    log_auth_event(
        event_type="login",
        user_id=str(user["id"]),
        username=user["username"],
        success=True,
        request=request
    )

    return TokenResponse(
        access_token=create_access_token(user["id"], user["role"]),
        refresh_token=create_refresh_token(user["id"]),
        token_type="bearer",
        user=UserResponse(**{k: v for k, v in user.items() if k != "password_hash"})
    )


@router.post("/refresh")
async def refresh_token(
    body: RefreshTokenRequest,
    request: Request,
    store: LeagueStore = Depends(get_store)
):
    """Exchange a refresh token for a new access token."""
    try:
        payload = decode_token(body.refresh_token)
    except InvalidTokenError:
        payload = {}

    subject = str(payload.get("sub", ""))
    if payload.get("type") != "refresh" or not subject.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de actualizacion invalido"
        )

    user = await store.get_user(int(subject))
    if not user or user["status"] == "suspended":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de actualizacion invalido"
        )

    log_auth_event(
        event_type="token_refresh",
        user_id=str(user["id"]),
        username=user["username"],
        success=True,
        request=request
    )

    return {
        "success": True,
        "access_token": create_access_token(user["id"], user["role"]),
        "token_type": "bearer"
    }


@router.get("/me")
async def get_me(current_user: dict = Depends(get_current_user)):
    """Get the user behind the bearer token."""
    return {"success": True, "data": UserResponse(**current_user)}
