# backend/app/routers/configs.py
# POST = 405 (entries come from defaults), DELETE = 405

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.configs import ConfigRead, ConfigUpdate
from ..services.audit import record_audit
from ..services.config_provider import ConfigNotFound, ConfigProvider
from ..services.slots import InvalidConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/", response_model=list[ConfigRead])
def list_configs(
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return ConfigProvider(db).list_entries(category)


@router.get("/{key}", response_model=ConfigRead)
def get_config(key: str, db: Session = Depends(get_db)):
    entry = ConfigProvider(db).get_entry(key)
    if not entry:
        raise HTTPException(status_code=404, detail="Configuration not found")
    return entry


@router.put("/{key}", response_model=ConfigRead)
def update_config(
    key: str,
    data: ConfigUpdate,
    db: Session = Depends(get_db),
):
    provider = ConfigProvider(db)

    previous = provider.get_entry(key)
    previous_state = ConfigRead.model_validate(previous).model_dump(mode="json") if previous else None

    try:
        entry = provider.update(key, data.value, updated_by=data.updated_by)
    except ConfigNotFound:
        db.rollback()
        raise HTTPException(status_code=404, detail="Configuration not found")
    except InvalidConfig as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    record_audit(
        db,
        "update_configuration",
        actor_user_id=data.updated_by,
        payload={
            "previous_state": previous_state,
            "new_state": ConfigRead.model_validate(entry).model_dump(mode="json"),
        },
    )
    db.commit()
    db.refresh(entry)
    return entry


@router.post("/")
def post_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{key}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
