# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Administrative trigger for the expiry sweep.
Same entry point as the periodic timer.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.dependencies import get_sweep_service
from app.schemas import SweepResponse
from app.services.sweep_service import SweepService

router = APIRouter(tags=["Sweep"])


@router.post(
    "/run-sweep",
    response_model=SweepResponse,
    responses={503: {"model": SweepResponse, "description": "Record set could not be loaded"}},
)
def run_sweep(service: SweepService = Depends(get_sweep_service)):
    """Run one expiry sweep pass now and return its report."""
    report = service.run_pass()
    if not report.ok:
        return JSONResponse(status_code=503, content=report.model_dump())
    return report
