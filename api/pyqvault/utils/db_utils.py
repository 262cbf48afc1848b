from sqlalchemy.orm import Session, Query
from sqlalchemy import and_, func
from typing import Optional, List, Dict, Any, Tuple

from ..models.file import File, FILE_FIELD_MAP
from ..models.saved_file import SavedFile, SAVED_FILE_CATEGORIES


def icontains(column, value: str):
    """Case-insensitive literal substring match (LIKE wildcards in value are escaped)"""
    return func.lower(column).contains(value.lower(), autoescape=True)


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], int]:
    """Apply skip/limit and return (items, total matching rows)"""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total


def pagination_info(page: int, limit: int, total: int, total_key: str) -> Dict[str, Any]:
    total_pages = -(-total // limit) if limit > 0 else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        total_key: total,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


# ────────────────────────────────────────────────────────────────────
#  Files
# ────────────────────────────────────────────────────────────────────
def build_file_filters(
    college_name: Optional[str] = None,
    course_name: Optional[str] = None,
    file_type: Optional[str] = None,
    year: Optional[str] = None,
    branch: Optional[str] = None,
    semester: Optional[str] = None,
    paper_type: Optional[str] = None,
) -> list:
    """Translate list query parameters into SQLAlchemy filter clauses"""
    filters = []
    if college_name:
        filters.append(icontains(File.college_name, college_name))
    if course_name:
        filters.append(icontains(File.course_name, course_name))
    if branch:
        filters.append(icontains(File.branch, branch))
    if file_type:
        filters.append(File.file_type == file_type)
    if year:
        filters.append(File.year == year)
    if semester:
        filters.append(File.semester == semester)
    if paper_type:
        filters.append(File.paper_type == paper_type)
    return filters


def list_files(db: Session, filters: list, page: int, limit: int) -> Tuple[List[File], int]:
    query = (
        db.query(File)
        .filter(*filters)
        .order_by(File.upload_date.desc(), File.id.desc())
    )
    return paginate(query, page, limit)


def get_file_by_id(db: Session, file_id: int) -> Optional[File]:
    """Get file by ID"""
    return db.query(File).filter(File.id == file_id).first()


def create_file_record(db: Session, data: Dict[str, Any]) -> File:
    """Insert a File row from camelCase API fields"""
    try:
        db_file = File(**{FILE_FIELD_MAP[key]: value for key, value in data.items() if key in FILE_FIELD_MAP})
        db.add(db_file)
        db.commit()
        db.refresh(db_file)
        return db_file
    except Exception as e:
        db.rollback()
        raise e


def update_file_record(db: Session, db_file: File, data: Dict[str, Any]) -> File:
    try:
        for key, value in data.items():
            if key in FILE_FIELD_MAP:
                setattr(db_file, FILE_FIELD_MAP[key], value)
        db.commit()
        db.refresh(db_file)
        return db_file
    except Exception as e:
        db.rollback()
        raise e


def delete_file_record(db: Session, db_file: File) -> None:
    """Delete the File row only; bookmarks pointing at it are left in place"""
    try:
        db.delete(db_file)
        db.commit()
    except Exception as e:
        db.rollback()
        raise e


def get_files_by_ids(db: Session, file_ids: List[int]) -> Dict[int, File]:
    if not file_ids:
        return {}
    return {f.id: f for f in db.query(File).filter(File.id.in_(file_ids)).all()}


# ────────────────────────────────────────────────────────────────────
#  Saved files
# ────────────────────────────────────────────────────────────────────
def get_saved_file(db: Session, file_id: int, user_id: str) -> Optional[SavedFile]:
    """Get a user's bookmark for a file"""
    return db.query(SavedFile).filter(
        and_(
            SavedFile.file_id == file_id,
            SavedFile.user_id == user_id
        )
    ).first()


def get_saved_file_by_id(db: Session, saved_id: int, user_id: str) -> Optional[SavedFile]:
    """Get a bookmark by its own ID (with user verification)"""
    return db.query(SavedFile).filter(
        and_(
            SavedFile.id == saved_id,
            SavedFile.user_id == user_id
        )
    ).first()


def list_saved_files(
    db: Session,
    user_id: str,
    category: Optional[str],
    page: int,
    limit: int
) -> Tuple[List[SavedFile], int]:
    query = db.query(SavedFile).filter(SavedFile.user_id == user_id)
    if category and category != "all":
        query = query.filter(SavedFile.category == category)
    query = query.order_by(SavedFile.saved_at.desc(), SavedFile.id.desc())
    return paginate(query, page, limit)


def count_saved_by_category(db: Session, user_id: str) -> Dict[str, int]:
    """Per-category bookmark counts for a user, zero-filled"""
    rows = (
        db.query(SavedFile.category, func.count(SavedFile.id))
        .filter(SavedFile.user_id == user_id)
        .group_by(SavedFile.category)
        .all()
    )
    counts = {category: 0 for category in SAVED_FILE_CATEGORIES}
    for category, count in rows:
        counts[category] = count
    counts["all"] = sum(count for _, count in rows)
    return counts


def create_saved_file(db: Session, data: Dict[str, Any]) -> SavedFile:
    try:
        saved = SavedFile(**data)
        db.add(saved)
        db.commit()
        db.refresh(saved)
        return saved
    except Exception as e:
        db.rollback()
        raise e


def delete_saved_file(db: Session, saved: SavedFile) -> None:
    try:
        db.delete(saved)
        db.commit()
    except Exception as e:
        db.rollback()
        raise e
