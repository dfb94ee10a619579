"""
CRUD operations for the jobs collection.

Implements the Repository pattern to encapsulate all store operations for
jobs, including the search predicate shared by paginated listing and
counting.
"""

from typing import List, Optional, Tuple
from sqlalchemy.orm import Query, Session

from app.core.database import parse_document_id, store_operation
from app.core.exceptions import InvalidPayloadError
from app.models.job import Job
from app.schemas.job import JobCreateRequest, JobUpdateRequest, SortOrder

# Largest row offset handed to the store; OFFSET is a signed 64-bit integer
MAX_OFFSET = 2 ** 62


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _search_query(db: Session, category: Optional[str], search: Optional[str]) -> Query:
    """
    Build the job search predicate.

    - search: case-insensitive literal substring of the title; empty matches all
    - category: exact equality when given
    """
    query = db.query(Job)

    if search:
        query = query.filter(Job.title.ilike(f"%{_escape_like(search)}%", escape="\\"))

    if category:
        query = query.filter(Job.category == category)

    return query


def page_offset(page: int, size: int) -> int:
    """
    Convert a 1-based page number to a row offset.

    Pages below 1 clamp to 0; offsets far past any real result set clamp
    to MAX_OFFSET, which still yields an empty page.
    """
    return min(max(page - 1, 0) * size, MAX_OFFSET)


@store_operation("jobs.create")
def create(db: Session, job_data: JobCreateRequest, job_id: Optional[str] = None) -> Job:
    """
    Insert a new job document.

    Args:
        db: Database session
        job_data: Validated job payload (extra posting fields included)
        job_id: Explicit identifier (used by upserts); generated when None

    Returns:
        Created Job instance with id
    """
    data = job_data.model_dump()
    buyer = data.pop("buyer")

    db_job = Job(id=job_id) if job_id else Job()
    db_job.extra = {}
    db_job.apply_patch(data)
    db_job.set_buyer(buyer)

    db.add(db_job)
    db.commit()
    db.refresh(db_job)

    return db_job


@store_operation("jobs.get_by_id")
def get_by_id(db: Session, job_id: str) -> Optional[Job]:
    """
    Retrieve a job by its ID.

    Raises:
        InvalidIdentifierError: If job_id is not a well-formed identifier
    """
    return db.query(Job).filter(Job.id == parse_document_id(job_id)).first()


@store_operation("jobs.get_all")
def get_all(db: Session) -> List[Job]:
    """Every job, oldest first. No pagination."""
    return db.query(Job).order_by(Job.created_at.asc(), Job.id.asc()).all()


@store_operation("jobs.get_by_owner")
def get_by_owner(db: Session, email: str) -> List[Job]:
    """Jobs whose buyer.email matches (case-insensitively)."""
    return (
        db.query(Job)
        .filter(Job.buyer_email == email.strip().lower())
        .order_by(Job.created_at.asc(), Job.id.asc())
        .all()
    )


@store_operation("jobs.update")
def update(db: Session, job_id: str, job_data: JobUpdateRequest) -> Optional[Tuple[Job, bool]]:
    """
    Merge-patch the supplied fields into an existing job.

    Returns:
        (job, modified) if found, None otherwise

    Raises:
        InvalidPayloadError: If the merged prices form an inverted range
    """
    job = db.query(Job).filter(Job.id == parse_document_id(job_id)).first()
    if not job:
        return None

    modified = job.apply_patch(job_data.model_dump(exclude_unset=True))
    if not job.has_valid_price_range():
        context = {"job_id": job.id, "min_price": job.min_price, "max_price": job.max_price}
        db.rollback()
        raise InvalidPayloadError("min_price cannot exceed max_price", context=context)

    db.commit()
    db.refresh(job)

    return job, modified


@store_operation("jobs.delete")
def delete(db: Session, job_id: str) -> bool:
    """
    Delete a job by ID. Bids placed on it are left untouched.

    Returns:
        True if deleted, False if not found
    """
    job = db.query(Job).filter(Job.id == parse_document_id(job_id)).first()
    if not job:
        return False

    db.delete(job)
    db.commit()

    return True


@store_operation("jobs.search")
def search(
    db: Session,
    page: int = 1,
    size: int = 10,
    category: Optional[str] = None,
    sort: Optional[SortOrder] = None,
    search: Optional[str] = None,
) -> List[Job]:
    """
    One page of jobs matching the search predicate.

    Args:
        db: Database session
        page: 1-based page number
        size: Page size
        category: Optional exact category filter
        sort: Optional deadline ordering
        search: Optional title substring

    Returns:
        List of Job instances
    """
    query = _search_query(db, category, search)

    # created_at/id tie-breakers keep page boundaries stable
    if sort is not None:
        deadline = Job.deadline.asc() if sort.ascending else Job.deadline.desc()
        query = query.order_by(deadline, Job.created_at.asc(), Job.id.asc())
    else:
        query = query.order_by(Job.created_at.asc(), Job.id.asc())

    return query.offset(page_offset(page, size)).limit(size).all()


@store_operation("jobs.count")
def count(db: Session, category: Optional[str] = None, search: Optional[str] = None) -> int:
    """Number of jobs matching the same predicate as search()."""
    return _search_query(db, category, search).count()
