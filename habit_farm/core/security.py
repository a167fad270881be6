import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import ALGORITHM, BCRYPT_ROUNDS, DEFAULT_SECRET_KEY, LOGIN_EXPIRY_DAYS, SECRET_KEY
from .exceptions import Forbidden, NotFound, Unauthenticated
from .store import UserStore, get_store

logger = logging.getLogger(__name__)

if SECRET_KEY == DEFAULT_SECRET_KEY:
    logger.warning("SECRET_KEY not configured, using the development key.")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(username: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=LOGIN_EXPIRY_DAYS))
    return jwt.encode({"sub": username, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Returns the username a token was issued to, or raises Forbidden."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise Forbidden("Login expired, please log in again")
    except JWTError:
        raise Forbidden("Invalid token")

    username = payload.get("sub")
    if not username:
        raise Forbidden("Invalid token")
    return username


def idle_too_long(last_login: Optional[datetime], now: datetime) -> bool:
    if last_login is None:
        return False
    return (now - last_login).days > LOGIN_EXPIRY_DAYS


def authenticate(authorization: Optional[str], store: UserStore, now: datetime) -> str:
    """
    Validates a bearer credential and the idle window of its user.

    The token lifetime and the time since the last login are checked
    independently; a user who has not logged in for more than
    LOGIN_EXPIRY_DAYS days is rejected even with an unexpired token.
    """
    if not authorization:
        raise Unauthenticated()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Malformed authorization header")

    username = decode_access_token(token.strip())

    try:
        record = store.load(username)
    except NotFound:
        logger.warning("Token presented for missing user %s", username)
        raise Forbidden("User does not exist")

    if idle_too_long(record.last_login, now):
        logger.warning("Rejected idle session for %s", username)
        raise Forbidden("Login expired, please log in again")

    return username


def get_current_username(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    store: UserStore = Depends(get_store),
) -> str:
    """
    A FastAPI dependency guarding every gameplay endpoint.
    """
    return authenticate(authorization, store, datetime.now())
