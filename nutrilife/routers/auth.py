import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from nutrilife.core.security import (
    get_current_identity,
    get_identity_provider,
    get_session,
    get_session_manager,
    oauth2_scheme,
)
from nutrilife.models.schemas import Token, UserCreate
from nutrilife.models.session_state import Identity, SessionState, View
from nutrilife.services.identity import IdentityProvider
from nutrilife.services.session_controller import SessionController, SessionManager

logger = logging.getLogger(__name__)

# Create the router for authentication endpoints
router = APIRouter(
    tags=["Authentication"]
)


@router.post("/signup", status_code=201, response_model=dict)
def sign_up(
    user_credentials: UserCreate,
    provider: IdentityProvider = Depends(get_identity_provider),
):
    """
    Handles new user registration with the identity provider.
    """
    try:
        created = provider.sign_up(user_credentials.email, user_credentials.password, user_credentials.name)
    except Exception as e:
        logger.error(f"❌ Signup failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if not created:
        raise HTTPException(status_code=400, detail="Could not create user for an unknown reason.")
    return {"message": "User created successfully. Please check your email for verification."}


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    provider: IdentityProvider = Depends(get_identity_provider),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Handles user login. It takes form data (not JSON) and returns a bearer token
    together with the phase the session resolved to (onboarding or active).
    """
    # OAuth2 form uses 'username' for the email field
    auth_session = provider.sign_in(form_data.username, form_data.password)
    if auth_session is None:
        # Avoid leaking specific error info, just say login failed.
        raise HTTPException(
            status_code=401,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = manager.open(auth_session.identity)
    return {
        "access_token": auth_session.access_token,
        "token_type": "bearer",
        "phase": session.state.phase.value,
    }


@router.post("/signout")
def sign_out(
    token: str = Depends(oauth2_scheme),
    identity: Identity = Depends(get_current_identity),
    provider: IdentityProvider = Depends(get_identity_provider),
    manager: SessionManager = Depends(get_session_manager),
):
    provider.sign_out(token)
    controller = manager.close(identity.uid)
    state = controller.state if controller else SessionState(identity_resolved=True)
    return {"status": "success", "session": state.summary()}


@router.get("/session")
def read_session(session: SessionController = Depends(get_session)):
    return session.state.summary()


@router.post("/session/navigate/{view}")
def navigate(view: View, session: SessionController = Depends(get_session)):
    session.navigate(view)
    return session.state.summary()
