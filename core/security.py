# core/security.py - Identité bearer (JWT) pour l'attribution des révisions

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.config import settings

# HTTP Bearer pour extraction du token
security = HTTPBearer()


@dataclass(frozen=True)
class Actor:
    """Utilisateur authentifié, passé explicitement à chaque transition"""
    id: str
    name: str
    email: Optional[str] = None
    role: str = "Designer"


# === JWT Token creation ===

def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Crée un JWT signé.

    Args:
        data: Payload (ex: {"sub": "user_id", "name": "...", "role": "Admin"})
        expires_delta: Durée de validité (défaut: settings.access_token_expire_minutes)

    Returns:
        JWT token string
    """
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({
        "exp": expire,
        "iat": now,
    })

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_actor_token(actor: Actor, expires_delta: Optional[timedelta] = None) -> str:
    """Crée un jeton pour un acteur donné."""
    return create_access_token(
        data={
            "sub": actor.id,
            "name": actor.name,
            "email": actor.email,
            "role": actor.role,
        },
        expires_delta=expires_delta,
    )


# === JWT Token validation ===

def decode_token(token: str) -> Dict[str, Any]:
    """
    Décode et valide un JWT.

    Raises:
        HTTPException 401 si invalide/expiré
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def actor_from_payload(payload: Dict[str, Any]) -> Actor:
    """Construit l'Actor depuis les claims du jeton."""
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing subject"
        )

    return Actor(
        id=str(user_id),
        name=payload.get("name") or str(user_id),
        email=payload.get("email"),
        role=payload.get("role") or "Designer",
    )


# === FastAPI Dependencies ===

async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Actor:
    """
    Extrait et valide le JWT, retourne l'acteur courant.

    Usage:
        @router.post("/{quote_id}/approve")
        async def approve(actor: Actor = Depends(get_current_actor)):
            ...
    """
    payload = decode_token(credentials.credentials)
    return actor_from_payload(payload)
