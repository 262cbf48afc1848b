from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, or_
from pydantic import ValidationError
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any, Tuple
import logging

from ..models.college import (
    College, CollegeCreate, CollegeUpdate, COLLEGE_FIELD_MAP,
)
from ..utils.db_utils import icontains, paginate

logger = logging.getLogger(__name__)


class CollegeConflictError(ValueError):
    """A college with the same name or code already exists."""


def is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class CollegeService:
    def __init__(self, db: Session):
        self.db = db

    def find_conflict(self, name: Optional[str], code: Optional[str], exclude_id: Optional[int] = None) -> Optional[College]:
        """Find a college whose name (case-insensitive) or code matches"""
        conditions = []
        if name:
            conditions.append(func.lower(College.name) == str(name).strip().lower())
        if code:
            conditions.append(College.code == str(code).strip().upper())
        if not conditions:
            return None

        query = self.db.query(College).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(College.id != exclude_id)
        return query.first()

    def get_college_by_id(self, college_id: int) -> Optional[College]:
        return self.db.query(College).filter(College.id == college_id).first()

    def list_colleges(
        self,
        page: int,
        limit: int,
        search: str = "",
        college_type: str = "",
        category: str = "",
        state: str = "",
        is_active: Optional[bool] = None,
    ) -> Tuple[List[College], int]:
        query = self.db.query(College)

        if search:
            query = query.filter(or_(
                icontains(College.name, search),
                icontains(College.code, search),
                icontains(College.city, search),
            ))
        if college_type:
            query = query.filter(College.type == college_type)
        if category:
            query = query.filter(icontains(College.category, category))
        if state:
            query = query.filter(icontains(College.state, state))
        if is_active is not None:
            query = query.filter(College.is_active == is_active)

        return paginate(query.order_by(College.name.asc()), page, limit)

    def create_college(self, college_data: CollegeCreate) -> College:
        """Create a new, active college"""
        if self.find_conflict(college_data.name, college_data.code):
            raise CollegeConflictError("College with this name or code already exists")

        data = college_data.model_dump(exclude_none=True)
        data["isActive"] = True
        data.setdefault("status", "active")
        college = College(**self._to_columns(data))

        try:
            self.db.add(college)
            self.db.commit()
            self.db.refresh(college)
        except IntegrityError as e:
            self.db.rollback()
            # Lost a race with a concurrent insert of the same name/code
            if is_unique_violation(e):
                raise CollegeConflictError("College with this name or code already exists")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating college: {str(e)}")
            raise

        logger.info(f"Created college: {college.name} ({college.code}) id={college.id}")
        return college

    def update_college(self, college_id: int, college_data: CollegeUpdate) -> Optional[College]:
        """Apply a partial update; returns None when the college doesn't exist"""
        college = self.get_college_by_id(college_id)
        if not college:
            return None

        data = college_data.model_dump(exclude_unset=True, exclude={"id"})
        if self.find_conflict(data.get("name"), data.get("code"), exclude_id=college_id):
            raise CollegeConflictError("College with this name or code already exists")

        for column, value in self._to_columns(data).items():
            setattr(college, column, value)

        try:
            self.db.commit()
            self.db.refresh(college)
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise CollegeConflictError("College with this name or code already exists")
            raise
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Updated college: {college.name} id={college.id}")
        return college

    def delete_college(self, college_id: int) -> bool:
        college = self.get_college_by_id(college_id)
        if not college:
            return False

        self.db.delete(college)
        self.db.commit()

        logger.info(f"Deleted college: {college.name}")
        return True

    def get_dropdown_options(self) -> List[Dict[str, Any]]:
        colleges = (
            self.db.query(College)
            .filter(College.is_active.is_(True))
            .order_by(College.name.asc())
            .all()
        )
        return [
            {
                "value": college.name,
                "label": college.name,
                "code": college.code,
                "location": f"{college.city}, {college.state}",
            }
            for college in colleges
        ]

    def bulk_import(self, colleges: List[Any]) -> Dict[str, Any]:
        """Insert new colleges and update existing ones matched by code or name.

        Each item is handled on its own: a bad record is recorded in
        ``errors`` and counted as skipped, the rest of the batch continues.
        """
        results = {"inserted": 0, "updated": 0, "skipped": 0, "errors": []}

        for raw in colleges:
            label = "unknown"
            try:
                if not isinstance(raw, dict):
                    raise ValueError("Expected an object")
                label = str(raw.get("name") or raw.get("code") or label)

                existing = self.find_conflict(raw.get("name"), raw.get("code"))
                if existing:
                    update = CollegeUpdate.model_validate(raw)
                    data = update.model_dump(exclude_unset=True, exclude={"id"})
                    for column, value in self._to_columns(data).items():
                        setattr(existing, column, value)
                    self.db.commit()
                    results["updated"] += 1
                    logger.info(f"Bulk import updated: {existing.name}")
                else:
                    create = CollegeCreate.model_validate(raw)
                    missing = [f for f in ("name", "code", "city", "state", "type") if not getattr(create, f)]
                    if missing:
                        raise ValueError(f"Missing required fields: {', '.join(missing)}")
                    data = create.model_dump(exclude_none=True)
                    data.setdefault("isActive", True)
                    data.setdefault("status", "active")
                    self.db.add(College(**self._to_columns(data)))
                    self.db.commit()
                    results["inserted"] += 1
                    logger.info(f"Bulk import added: {create.name}")
            except ValidationError as e:
                self.db.rollback()
                self._record_error(results, label, _first_validation_message(e))
            except IntegrityError as e:
                self.db.rollback()
                reason = "Duplicate name or code" if is_unique_violation(e) else "Invalid record"
                self._record_error(results, label, f"{reason}: {e.orig}")
            except ValueError as e:
                self.db.rollback()
                self._record_error(results, label, str(e))

        return results

    def get_statistics(self) -> Dict[str, Any]:
        def grouped(column, top: Optional[int] = None) -> List[Dict[str, Any]]:
            count = func.count(College.id)
            query = (
                self.db.query(column, count)
                .group_by(column)
                .order_by(count.desc(), column.asc())
            )
            if top:
                query = query.limit(top)
            return [{"_id": value, "count": n} for value, n in query.all()]

        since = datetime.utcnow() - timedelta(hours=24)
        return {
            "total": self.db.query(College).count(),
            "active": self.db.query(College).filter(College.is_active.is_(True)).count(),
            "recentlyAdded": self.db.query(College).filter(College.created_at >= since).count(),
            "byType": grouped(College.type),
            "byCategory": grouped(College.category),
            "byState": grouped(College.state, top=10),
        }

    @staticmethod
    def _to_columns(data: Dict[str, Any]) -> Dict[str, Any]:
        return {COLLEGE_FIELD_MAP[key]: value for key, value in data.items() if key in COLLEGE_FIELD_MAP}

    @staticmethod
    def _record_error(results: Dict[str, Any], label: str, message: str) -> None:
        logger.error(f"Bulk import error for {label}: {message}")
        results["errors"].append({"college": label, "error": message})
        results["skipped"] += 1


def _first_validation_message(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error.get('msg')}" if field else error.get("msg", str(exc))
