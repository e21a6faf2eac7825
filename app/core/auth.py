"""
Autenticazione: il bearer token viene validato dal servizio di auth ospitato
(GET {SUPABASE_URL}/auth/v1/user). Admin = id presente in ADMIN_USER_IDS.
Il cron è protetto da CRON_SECRET solo in produzione.
"""

import logging
from dataclasses import dataclass

import httpx
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.core.config import get_admin_user_ids, get_auth_settings, get_cron_secret, is_production
from app.models import User

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: str | None = None
    username: str | None = None


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def fetch_auth_user(token: str) -> AuthUser | None:
    """Valida il token sul servizio di auth. None se rifiutato."""
    base_url, anon_key = get_auth_settings()
    async with httpx.AsyncClient(timeout=10.0) as client:
        r = await client.get(
            f"{base_url}/auth/v1/user",
            headers={"apikey": anon_key, "Authorization": f"Bearer {token}"},
        )
    if r.status_code != 200:
        logger.info("Token rifiutato dal servizio auth: status %s", r.status_code)
        return None
    data = r.json()
    metadata = data.get("user_metadata") or {}
    return AuthUser(id=data["id"], email=data.get("email"), username=metadata.get("username"))


async def get_current_user(authorization: str | None = Header(default=None)) -> AuthUser:
    """Dependency: utente autenticato dal bearer token, altrimenti 401."""
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        user = await fetch_auth_user(token)
    except RuntimeError as e:
        logger.error("Auth non configurata: %s", e)
        raise HTTPException(status_code=503, detail="Authentication service not configured")
    except httpx.HTTPError as e:
        logger.warning("Servizio auth non raggiungibile: %s", e)
        raise HTTPException(status_code=502, detail="Authentication service unavailable")
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Dependency: solo utenti in ADMIN_USER_IDS."""
    admin_ids = get_admin_user_ids()
    if not admin_ids:
        logger.error("ADMIN_USER_IDS non configurata: endpoint admin disabilitati")
        raise HTTPException(status_code=500, detail="Admin access not configured")
    if user.id not in admin_ids:
        logger.warning("Accesso admin negato per user %s", user.id)
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def verify_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """In produzione richiede 'Bearer {CRON_SECRET}'; in sviluppo passa sempre."""
    if not is_production():
        return
    secret = get_cron_secret()
    if not secret or authorization != f"Bearer {secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")


def ensure_user_profile(db: Session, auth_user: AuthUser) -> User:
    """Crea il profilo utente locale al primo utilizzo."""
    user = db.query(User).filter(User.id == auth_user.id).first()
    if user:
        return user
    username = auth_user.username or (auth_user.email.split("@")[0] if auth_user.email else None)
    user = User(id=auth_user.id, email=auth_user.email, username=username, display_name=username)
    db.add(user)
    db.flush()
    logger.info("Creato profilo per user %s", auth_user.id)
    return user
