from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from nutrilife.models.session_state import Identity, SessionPhase
from nutrilife.services.ai_gateway import AIGateway, GeminiOracle
from nutrilife.services.identity import IdentityProvider, SupabaseIdentityProvider
from nutrilife.services.profile_store import ProfileStore, SupabaseKeyValueStore
from nutrilife.services.session_controller import SessionController, SessionManager

# The token will be in an 'Authorization: Bearer <token>' header; clients log in at '/token'.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token")


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProvider:
    return SupabaseIdentityProvider()


@lru_cache(maxsize=1)
def get_session_manager() -> SessionManager:
    return SessionManager(ProfileStore(SupabaseKeyValueStore()))


@lru_cache(maxsize=1)
def _gateway() -> AIGateway:
    return AIGateway(GeminiOracle())


def get_gateway() -> AIGateway:
    try:
        return _gateway()
    except EnvironmentError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_current_identity(
    token: str = Depends(oauth2_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    identity = provider.current_identity(token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def get_session(
    identity: Identity = Depends(get_current_identity),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionController:
    return manager.open(identity)


def get_active_session(session: SessionController = Depends(get_session)) -> SessionController:
    """Sessions that have finished onboarding."""
    if session.state.phase != SessionPhase.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Profile not found. Please complete onboarding.",
        )
    return session
