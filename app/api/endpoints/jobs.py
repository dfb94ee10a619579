import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db, parse_document_id
from app.core.deps import ensure_owner, get_current_identity
from app.core.exceptions import NotFoundError
from app.crud import job as job_crud
from app.schemas.auth import TokenIdentity
from app.schemas.common import CountResponse, DeleteResult, InsertResult, UpdateResult
from app.schemas.job import JobCreateRequest, JobResponse, JobUpdateRequest, SortOrder

router = APIRouter(tags=["Jobs"])
logger = logging.getLogger(__name__)


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(db: Session = Depends(get_db)):
    """
    List every job.

    Unpaginated; use GET /all-jobs for anything but small datasets.
    """
    return [job.to_document() for job in job_crud.get_all(db)]


@router.get("/job/{job_id}", response_model=JobResponse)
def get_job(job_id: str, db: Session = Depends(get_db)):
    """Retrieve a job by ID."""
    job = job_crud.get_by_id(db, job_id)

    if not job:
        raise NotFoundError("job", job_id)

    return job.to_document()


@router.post("/job", status_code=201, response_model=InsertResult)
def create_job(request: JobCreateRequest, db: Session = Depends(get_db)):
    """
    Create a new job posting.

    Fields beyond the known posting fields are stored and returned as-is.
    """
    new_job = job_crud.create(db, request)
    logger.info(f"Created job {new_job.id}: {new_job.title} (buyer {new_job.buyer_email})")
    return InsertResult(inserted_id=new_job.id)


@router.put("/job/{job_id}", response_model=UpdateResult)
def update_job(job_id: str, request: JobUpdateRequest, db: Session = Depends(get_db)):
    """
    Merge the supplied fields into a job.

    When the job does not exist the outcome depends on JOB_UPDATE_UPSERT:
    - False (default): 404
    - True: a job is created under `job_id` from the payload, which must
      then be a complete job (title and buyer)
    """
    result = job_crud.update(db, job_id, request)
    if result is not None:
        _, modified = result
        logger.info(f"Updated job {job_id} (modified={modified})")
        return UpdateResult(matched_count=1, modified_count=int(modified))

    if not settings.JOB_UPDATE_UPSERT:
        raise NotFoundError("job", job_id)

    try:
        create_request = JobCreateRequest.model_validate(request.model_dump(exclude_unset=True))
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    new_job = job_crud.create(db, create_request, job_id=parse_document_id(job_id))
    logger.info(f"Upserted job {new_job.id}")
    return UpdateResult(matched_count=0, modified_count=0, upserted_id=new_job.id)


@router.delete("/job/{job_id}", response_model=DeleteResult)
def delete_job(job_id: str, db: Session = Depends(get_db)):
    """
    Delete a job by ID. Bids placed on the job are kept.
    """
    deleted = job_crud.delete(db, job_id)

    if not deleted:
        raise NotFoundError("job", job_id)

    logger.info(f"Deleted job {job_id}")
    return DeleteResult(deleted_count=1)


@router.get("/jobs/{email}", response_model=list[JobResponse])
def list_jobs_by_owner(
    email: str,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Jobs posted by `email`. Only the owner may list them."""
    ensure_owner(identity, email)
    return [job.to_document() for job in job_crud.get_by_owner(db, email)]


@router.get("/all-jobs", response_model=list[JobResponse])
def search_jobs(
    page: int = 1,
    size: int = Query(10, ge=1, le=100),
    category: Optional[str] = Query(None, alias="filter"),
    sort: Optional[str] = Query(None, pattern="^(asc|desc|dsc)?$"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Search jobs with pagination.

    Args:
        page: 1-based page number (values below 1 are treated as 1)
        size: Page size (1-100)
        filter: Exact category to keep
        sort: Order by deadline, "asc" or "desc"/"dsc"
        search: Case-insensitive substring of the job title
    """
    jobs = job_crud.search(
        db,
        page=page,
        size=size,
        category=category or None,
        sort=SortOrder(sort) if sort else None,
        search=search,
    )
    return [job.to_document() for job in jobs]


@router.get("/job-count", response_model=CountResponse)
def count_jobs(
    category: Optional[str] = Query(None, alias="filter"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Number of jobs matching the same filter/search as /all-jobs."""
    return CountResponse(count=job_crud.count(db, category=category or None, search=search))
