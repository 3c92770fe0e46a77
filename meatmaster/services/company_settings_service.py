from typing import Optional

from sqlalchemy.orm import Session

from meatmaster.common.exceptions import ValidationError
from meatmaster.logger_config import logger
from meatmaster.models.company_settings import CompanySettings

_FIELDS = ("company_name", "company_logo", "company_address", "company_phone", "company_email")


def get_company_settings(db: Session) -> Optional[CompanySettings]:
    """The single settings row, or None when nothing has been saved yet."""
    return db.query(CompanySettings).order_by(CompanySettings.updated_at.desc()).first()


def set_company_settings(
    db: Session,
    company_name: str,
    company_logo: Optional[str] = None,
    company_address: Optional[str] = None,
    company_phone: Optional[str] = None,
    company_email: Optional[str] = None,
) -> CompanySettings:
    """Create the settings row or overwrite the existing one."""
    if not company_name or not company_name.strip():
        raise ValidationError("Company name is required")

    record = get_company_settings(db)
    if record is None:
        record = CompanySettings()
        db.add(record)

    record.company_name = company_name.strip()
    record.company_logo = company_logo
    record.company_address = company_address
    record.company_phone = company_phone
    record.company_email = company_email

    db.commit()
    db.refresh(record)
    logger.info(f"Company settings saved for {record.company_name}")
    return record


def update_company_settings(db: Session, **fields) -> Optional[CompanySettings]:
    """Merge the given fields into the existing settings. None when nothing is saved yet."""
    record = get_company_settings(db)
    if record is None:
        return None

    for key, value in fields.items():
        if key not in _FIELDS or value is None:
            continue
        if key == "company_name":
            if not value.strip():
                raise ValidationError("Company name is required")
            value = value.strip()
        setattr(record, key, value)

    db.commit()
    db.refresh(record)
    return record


def clear_company_settings(db: Session) -> bool:
    deleted = db.query(CompanySettings).delete()
    db.commit()
    if deleted:
        logger.info("Company settings cleared")
    return bool(deleted)
