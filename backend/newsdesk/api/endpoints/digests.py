from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
from newsdesk.core.auth import get_current_user_id
from newsdesk.core.database import get_db
from newsdesk.models.digest import DigestType
from newsdesk.schemas.digest import Digest as DigestSchema, DigestStateChange
from newsdesk.services.digest_generator import DIGEST_PERIODS, DigestGenerator

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.post("/daily", response_model=Optional[DigestSchema])
@limiter.limit("10/minute")
async def generate_daily_digest(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Create the digest for the last 24 hours.

    Returns null when a daily digest already covers that period.
    """
    return DigestGenerator(db).generate_daily_digest(user_id)


@router.post("/{digest_type}", response_model=Optional[DigestSchema])
@limiter.limit("10/minute")
async def generate_digest(
    request: Request,
    digest_type: DigestType,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if digest_type not in DIGEST_PERIODS:
        raise HTTPException(
            status_code=422,
            detail=f"{digest_type.value} digests cannot be generated on demand",
        )
    return DigestGenerator(db).generate_digest(user_id, digest_type)


@router.get("/{digest_id}", response_model=DigestSchema)
async def get_digest(
    digest_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    digest = DigestGenerator(db).get_digest(user_id, digest_id)
    if not digest:
        raise HTTPException(status_code=404, detail="Digest not found")
    return digest


@router.post("/{digest_id}/read", response_model=DigestStateChange)
async def mark_digest_as_read(
    digest_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not DigestGenerator(db).mark_digest_as_read(user_id, digest_id):
        raise HTTPException(status_code=404, detail="Digest not found")
    return DigestStateChange(updated=True)


@router.post("/{digest_id}/sent", response_model=DigestStateChange)
async def mark_digest_as_sent(
    digest_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not DigestGenerator(db).mark_digest_as_sent(user_id, digest_id):
        raise HTTPException(status_code=404, detail="Digest not found")
    return DigestStateChange(updated=True)
