import logging
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.config import Settings
from app.core.dependencies import get_settings
from app.core.errors import BadRequest, Conflict, Internal, Unauthorized
from app.core.security import create_access_token, hash_password, unusable_password_hash, verify_password
from app.database import get_db
from app.models.users import User
from app.schemas.users import (
    AuthResponse, GoogleAuthRequest, GoogleAuthResponse, GoogleUser, UserLogin, UserPrivate, UserRegister,
)
from app.services.google_auth import GoogleTokenError, GoogleTokenVerifier

router = APIRouter(tags=["auth"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_google_verifier(request: Request) -> GoogleTokenVerifier:
    return request.app.state.google_verifier


def issue_token(user: User, settings: Settings) -> str:
    try:
        return create_access_token(user.id, user.email, user.role, settings)
    except Exception as e:
        logger.error(f"Failed to generate token for user {user.id}: {str(e)}")
        raise Internal("Failed to generate token", details=str(e))


def available_username(db: Session, base: str) -> str:
    """
    Return base, or base followed by the first free numeric suffix.

    The result always fits the username column; base is shortened to leave
    room for the suffix.
    """
    max_length = User.__table__.c.username.type.length
    candidate = base[:max_length]
    suffix = 1
    while db.query(User.id).filter(User.username == candidate).first():
        suffix += 1
        tail = str(suffix)
        candidate = f"{base[:max_length - len(tail)]}{tail}"
    return candidate


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    user: UserRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Register a user with email and password and sign them in"""
    logger.info(f"Registering user {user.username}")

    if db.query(User).filter(User.email == user.email).first():
        logger.warning(f"Registration refused, email already registered: {user.email}")
        raise Conflict("Email already registered")

    if db.query(User).filter(User.username == user.username).first():
        raise Conflict("Username already taken")

    db_user = User(
        email=user.email,
        username=user.username,
        name=user.name,
        hashed_password=hash_password(user.password),
        role=user.role,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration
        db.rollback()
        raise Conflict("Email or username already registered")
    db.refresh(db_user)

    logger.info(f"User registered: {db_user.email} (ID: {db_user.id})")
    return AuthResponse(token=issue_token(db_user, settings), user=UserPrivate.model_validate(db_user))


@router.post("/login", response_model=AuthResponse)
def login_user(
    userdetails: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    logger.info(f"Authenticating user with email: {userdetails.email}")
    db_user = db.query(User).filter(User.email == userdetails.email).first()
    if not db_user or not verify_password(userdetails.password, db_user.hashed_password):
        raise Unauthorized("Invalid credentials")

    return AuthResponse(token=issue_token(db_user, settings), user=UserPrivate.model_validate(db_user))


@router.post("/auth/google", response_model=GoogleAuthResponse)
def google_auth(
    body: GoogleAuthRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    """
    Sign in with a Google ID token.

    The first sign-in for an email creates a designer account; later sign-ins
    reuse it. Returns a session token and the public user fields.
    """
    if not body.credential.strip():
        raise BadRequest("No credential provided")

    try:
        payload = verifier.verify(body.credential)
    except GoogleTokenError as e:
        raise BadRequest("Invalid token", details=str(e))

    email = payload["email"]
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(
            email=email,
            username=available_username(db, email.split("@")[0]),
            name=payload.get("name"),
            profile_picture=payload.get("picture"),
            google_id=payload.get("sub"),
            role="designer",
            hashed_password=unusable_password_hash(),
        )
        db.add(user)
        try:
            db.commit()
            db.refresh(user)
            logger.info(f"Created new user: {user.email}")
        except IntegrityError:
            # A concurrent sign-in created the account first
            db.rollback()
            user = db.query(User).filter(User.email == email).first()
            if not user:
                raise Internal("Failed to create user")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating user: {str(e)}")
            raise Internal("Failed to create user", details=str(e))

    return GoogleAuthResponse(token=issue_token(user, settings), user=GoogleUser.model_validate(user))
