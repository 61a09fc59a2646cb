import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tracker.api.schemas import AuthResultDTO, LoginDTO, RegisterDTO
from tracker.storage.database import get_db
from tracker.storage.repositories import UserRepository
from tracker.utils.security import create_access_token, hash_password, verify_password

router = APIRouter()
logger = logging.getLogger(__name__)


def _email_taken(email: str) -> HTTPException:
    logger.info(f"Registration rejected: {email} already registered")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")


@router.post("/register", response_model=AuthResultDTO, summary="Register a new user")
def register(req: RegisterDTO, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    if repo.email_exists(req.email):
        raise _email_taken(req.email)

    user = repo.create(req.name, req.email, hash_password(req.password))
    if user is None:
        # Lost a race with a concurrent registration for the same email
        raise _email_taken(req.email)
    logger.info(f"Registered user {user.id}")
    return AuthResultDTO(token=create_access_token(user), name=user.display_name, email=user.email)


@router.post("/login", response_model=AuthResultDTO, summary="Log in and receive a bearer token")
def login(req: LoginDTO, db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_email(req.email)
    if user is None or not verify_password(req.password, user.password_hash):
        logger.info("Login failed: invalid credentials")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return AuthResultDTO(token=create_access_token(user), name=user.display_name, email=user.email)
