"""Media reference API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from strands.database import get_db
from strands.dependencies import Principal, get_current_principal
from strands.models.media import MediaType
from strands.schemas.strand import MediaCreate, MediaOut
from strands.services import strand_service

router = APIRouter()


@router.post("/", response_model=MediaOut, status_code=status.HTTP_201_CREATED)
def register_media(payload: MediaCreate, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    """Record a file already stored by the upload pipeline."""
    values = payload.model_dump()
    values["media_type"] = MediaType(values["media_type"])
    return strand_service.register_media(db, principal, values)
