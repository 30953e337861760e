"""Manual trigger for a digest run."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from prdigest.api.dependencies import JobDep
from prdigest.api.models import APIResponse, RunReportResponse, run_report_to_response
from prdigest.scheduler import RunStatus

router = APIRouter(tags=["digest"])


@router.post("/digest/run", response_model=APIResponse[RunReportResponse])
def run_digest(job: JobDep) -> APIResponse[RunReportResponse] | JSONResponse:
    """Run the digest job now and report the outcome."""
    report = job.run()
    if report.status == RunStatus.SKIPPED:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[None](
                data=None, error="Digest run already in progress"
            ).model_dump(),
        )
    return APIResponse(data=run_report_to_response(report))
