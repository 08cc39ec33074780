from pydantic import BaseModel


class CounterValue(BaseModel):
    value: int


class HealthStatus(BaseModel):
    status: str = "healthy"
    service: str
    redis: str = "connected"
    vibe: str = "immaculate"


class ErrorResponse(BaseModel):
    error: str
