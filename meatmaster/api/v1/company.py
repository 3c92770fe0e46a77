from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from meatmaster.core.dependencies import get_current_active_user, get_db, require_admin
from meatmaster.logger_config import logger
from meatmaster.models.user import User
from meatmaster.schemas.company_settings import (
    CompanySettingsResponse,
    CompanySettingsSet,
    CompanySettingsUpdate,
)
from meatmaster.services.company_settings_service import (
    clear_company_settings,
    get_company_settings,
    set_company_settings,
    update_company_settings,
)

router = APIRouter()


@router.get("", response_model=CompanySettingsResponse)
def read_company_settings(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    record = get_company_settings(db)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company settings not configured"
        )
    return record


@router.put("", response_model=CompanySettingsResponse)
def save_company_settings(
    settings_data: CompanySettingsSet,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create or replace the company settings."""
    record = set_company_settings(db, **settings_data.model_dump())
    logger.info(f"Company settings saved by {current_user.email}")
    return record


@router.patch("", response_model=CompanySettingsResponse)
def patch_company_settings(
    settings_data: CompanySettingsUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    record = update_company_settings(db, **settings_data.model_dump(exclude_unset=True))
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company settings not configured"
        )
    return record


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_company_settings(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    clear_company_settings(db)
    return None
