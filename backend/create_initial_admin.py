# backend/create_initial_admin.py

import argparse
import os

from assetdb.database import SessionLocal
from assetdb.apps.accounts import models as account_models
from assetdb.apps.catalog import models as catalog_models
from assetdb.security import create_access_token, get_password_hash


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the first company, superuser and component category.")
    parser.add_argument("--company", default=os.getenv("INITIAL_COMPANY", "Default Company"))
    parser.add_argument("--email", default=os.getenv("INITIAL_ADMIN_EMAIL", "admin@assetdb.local"))
    parser.add_argument("--password", default=os.getenv("INITIAL_ADMIN_PASSWORD", "ChangeMe123!"))
    parser.add_argument("--category", default="Components")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    db = SessionLocal()
    try:
        existing = db.query(account_models.User).filter(account_models.User.email == args.email).first()
        if existing:
            print(f"[INFO] User already exists: id={existing.id}, email={existing.email}")
            return

        company = db.query(account_models.Company).filter(account_models.Company.name == args.company).first()
        if company is None:
            company = account_models.Company(name=args.company)
            db.add(company)
            db.flush()

        category = (
            db.query(catalog_models.Category)
            .filter(
                catalog_models.Category.name == args.category,
                catalog_models.Category.category_type == catalog_models.CategoryTypeEnum.COMPONENT,
            )
            .first()
        )
        if category is None:
            db.add(
                catalog_models.Category(
                    name=args.category,
                    category_type=catalog_models.CategoryTypeEnum.COMPONENT,
                )
            )

        user = account_models.User(
            company_id=company.id,
            email=args.email,
            full_name="Asset DB Admin",
            role=account_models.AccountRole.SUPERUSER,
            is_active=True,
            is_superuser=True,
            hashed_password=get_password_hash(args.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        print("[OK] Created superuser:")
        print(f"  id:       {user.id}")
        print(f"  email:    {user.email}")
        print(f"  company:  {company.name} ({company.id})")
        print(f"  password: {args.password}")
        print(f"  token:    {create_access_token(data={'sub': user.id, 'company_id': company.id})}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
