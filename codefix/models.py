from pydantic import BaseModel, ConfigDict, Field, StrictStr
from typing import Optional, Union


class AnalysisRequest(BaseModel):
    """The model for the incoming request. Fields are validated in declaration order."""
    language: StrictStr = Field(min_length=1)
    code: StrictStr = Field(min_length=1)


class ErrorDetail(BaseModel):
    """The single most critical problem the model found in the code."""
    type: str = "UnknownError"
    reason: str = "Unknown"
    line: Optional[Union[int, float]] = None


class AnalysisResult(BaseModel):
    """The model for the outgoing response."""
    model_config = ConfigDict(populate_by_name=True)

    has_error: bool = Field(False, alias="hasError")
    error: Optional[ErrorDetail] = None
    corrected_code: Optional[str] = Field(None, alias="correctedCode")

    def to_response(self) -> dict:
        """Wire shape with camelCase keys and explicit nulls."""
        return self.model_dump(by_alias=True)


NO_ERROR_RESULT = AnalysisResult(has_error=False, error=None, corrected_code=None)
