"""
Authentification par jeton JWT (Bearer).
Le jeton est émis par le fournisseur d'identité ; `sub` porte l'identifiant du propriétaire des devis.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

router = APIRouter(prefix="/api/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)

JWT_SECRET = os.getenv("JWT_SECRET", "solvix-secret-change-me-in-prod")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = 30
DOWNLOAD_TOKEN_MINUTES = int(os.getenv("DOWNLOAD_TOKEN_MINUTES", "15"))


def create_token(user_id: str, email: str = "", expires: Optional[timedelta] = None) -> str:
    """Crée un JWT token."""
    expire = datetime.now(timezone.utc) + (expires or timedelta(days=JWT_EXPIRE_DAYS))
    payload = {
        "sub": user_id,
        "email": email,
        "exp": expire,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Décode et valide un JWT token."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalide ou expiré",
        )
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token sans utilisateur",
        )
    return payload


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Dépendance FastAPI pour vérifier l'authentification."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Non authentifié",
        )
    return decode_token(credentials.credentials)


def create_download_token(user_id: str) -> str:
    """Jeton court, transmis dans l'URL des liens de téléchargement."""
    return create_token(user_id, expires=timedelta(minutes=DOWNLOAD_TOKEN_MINUTES))


async def get_download_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token: Optional[str] = Query(None, description="Jeton de téléchargement"),
) -> dict:
    """Comme get_current_user, avec repli sur ?token= pour les liens du navigateur."""
    if credentials is not None:
        return decode_token(credentials.credentials)
    if token:
        return decode_token(token)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Non authentifié",
    )


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    """Retourne les infos de l'utilisateur connecté."""
    return {
        "user_id": user["sub"],
        "email": user.get("email", ""),
    }
