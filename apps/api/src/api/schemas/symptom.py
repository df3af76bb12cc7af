from pydantic import BaseModel, Field


class SymptomClassifyRequest(BaseModel):
    symptoms: str = Field(..., max_length=2000)


class SymptomAssessmentResult(BaseModel):
    department: str
    reason: str
    urgency: str
    additional_advice: str
