"""Line demand endpoints."""

from fastapi import APIRouter

from boardwatch.api.v1.dependencies import CurrentUserDep, DemandCounterDep
from boardwatch.schemas.line import LineDemandList, LineDemandRead

router = APIRouter(prefix="/lines", tags=["lines"])


@router.get("/demand", response_model=LineDemandList)
async def line_demand(_: CurrentUserDep, demand: DemandCounterDep) -> LineDemandList:
    """Return the confirmed-boarding tally of every known line."""
    return LineDemandList(
        lines=[LineDemandRead.model_validate(counter) for counter in demand.all()]
    )
