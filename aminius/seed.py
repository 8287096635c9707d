"""
Lookup data seeding - insurance companies and policy types.

Runs at startup and is idempotent: existing names are left alone.
"""

import logging

from sqlalchemy.orm import Session

from .models import InsuranceCompany, PolicyType

logger = logging.getLogger(__name__)

INSURANCE_COMPANIES = (
    "Jubilee Insurance",
    "Britam",
    "Old Mutual",
    "AAR Insurance",
    "CIC Insurance",
)

POLICY_TYPES = ("Motor", "Life", "Health", "Travel", "Property", "Marine")


def seed_lookups(db: Session) -> int:
    inserted = 0

    existing = {name for (name,) in db.query(InsuranceCompany.company_name).all()}
    for name in INSURANCE_COMPANIES:
        if name not in existing:
            db.add(InsuranceCompany(company_name=name))
            inserted += 1

    existing = {name for (name,) in db.query(PolicyType.type_name).all()}
    for name in POLICY_TYPES:
        if name not in existing:
            db.add(PolicyType(type_name=name))
            inserted += 1

    db.commit()
    if inserted:
        logger.info(f"✅ Seeded {inserted} lookup rows")
    return inserted
