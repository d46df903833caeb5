"""Job endpoints: list, create, delete, apply."""

from typing import Optional

from fastapi import APIRouter, Depends

from insyd.api.dependencies import get_services
from insyd.api.schemas import (
    ApplyResponse,
    CreateJobRequest,
    JobCreatedResponse,
    JobListResponse,
    JobOut,
    MessageResponse,
    UserEmailRequest,
)
from insyd.domain.models import JobSummary
from insyd.services import Services

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=JobListResponse)
def list_jobs(services: Services = Depends(get_services)):
    """Every job, newest first, with application counts."""
    summaries = services.content.list_jobs()
    return JobListResponse(jobs=[JobOut.from_summary(s) for s in summaries])


@router.post("", response_model=JobCreatedResponse)
def create_job(
    body: Optional[CreateJobRequest] = None,
    services: Services = Depends(get_services),
):
    """Create a job and notify the author's followers."""
    body = body or CreateJobRequest()
    created = services.content.create_job(body.email, body.title, body.company)
    summary = JobSummary(job=created.item, author_email=created.author_email, applications=0)
    return JobCreatedResponse(
        message="Job created successfully",
        job=JobOut.from_summary(summary),
        notified_followers=created.notified_followers,
    )


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(
    job_id: str,
    body: Optional[UserEmailRequest] = None,
    services: Services = Depends(get_services),
):
    body = body or UserEmailRequest()
    services.content.delete_job(job_id, body.user_email)
    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/apply", response_model=ApplyResponse)
def apply_to_job(
    job_id: str,
    body: Optional[UserEmailRequest] = None,
    services: Services = Depends(get_services),
):
    body = body or UserEmailRequest()
    count = services.interactions.apply(job_id, body.user_email)
    return ApplyResponse(message="Applied to job successfully", applications=count)
