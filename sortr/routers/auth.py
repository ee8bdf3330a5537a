from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
import httpx
from sortr.activity import ActivityObserver, log_activity
from sortr.config import Settings, get_settings
from sortr.database import get_db
from sortr.models.activity import ActivityAction, EntityType
from sortr.ratelimit import RateLimiter, get_rate_limiter, limit_auth_attempts
from sortr.schemas.user import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, ProfileUpdate, OAuthMobileRequest,
)
from sortr.security import Identity, create_access_token, get_current_identity
from sortr.services.oauth_service import OAuthProfile, get_oauth_http_client, verify_google, verify_github, verify_microsoft
from sortr.routers.users import user_id_of, username_of
import sortr.services.user_service as svc

router = APIRouter(prefix="/api", tags=["auth"])


def _token_response(settings: Settings, user) -> TokenResponse:
    return TokenResponse(token=create_access_token(settings, user), user=UserResponse.model_validate(user))


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _=Depends(limit_auth_attempts),
):
    user = svc.register(db, data)
    return _token_response(settings, user)


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    client_key: str = Depends(limit_auth_attempts),
):
    user = svc.authenticate(db, data.username, data.password)
    limiter.reset(client_key)
    return _token_response(settings, user)


async def _oauth_login(db: Session, settings: Settings, profile: OAuthProfile) -> TokenResponse:
    user = await run_in_threadpool(
        svc.find_or_create_oauth_user,
        db,
        profile.provider,
        profile.provider_id,
        profile.email,
        profile.display_name,
        profile.username_hint,
    )
    return _token_response(settings, user)


@router.post("/auth/google-mobile", response_model=TokenResponse)
async def google_mobile(
    data: OAuthMobileRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_oauth_http_client),
    _=Depends(limit_auth_attempts),
):
    profile = await verify_google(client, settings, data.id_token)
    return await _oauth_login(db, settings, profile)


@router.post("/auth/github-mobile", response_model=TokenResponse)
async def github_mobile(
    data: OAuthMobileRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_oauth_http_client),
    _=Depends(limit_auth_attempts),
):
    profile = await verify_github(client, data.access_token)
    return await _oauth_login(db, settings, profile)


@router.post("/auth/microsoft-mobile", response_model=TokenResponse)
async def microsoft_mobile(
    data: OAuthMobileRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_oauth_http_client),
    _=Depends(limit_auth_attempts),
):
    profile = await verify_microsoft(client, data.access_token)
    return await _oauth_login(db, settings, profile)


@router.get("/me", response_model=UserResponse)
def get_me(db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.get_user(db, identity.id)


@router.put("/me", response_model=UserResponse)
def update_me(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    activity: ActivityObserver = Depends(log_activity(EntityType.user, ActivityAction.update, entity_id=user_id_of, entity_name=username_of)),
):
    user = svc.update_profile(db, identity.id, data)
    return activity.observe(UserResponse.model_validate(user), body=data)
