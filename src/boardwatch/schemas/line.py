"""Line demand schemas."""

from pydantic import BaseModel, ConfigDict


class LineDemandRead(BaseModel):
    line_id: str
    total_confirmations: int

    model_config = ConfigDict(from_attributes=True)


class LineDemandList(BaseModel):
    lines: list[LineDemandRead]
