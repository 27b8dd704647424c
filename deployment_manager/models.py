from pydantic import BaseModel, Field


class DeploymentRequest(BaseModel):
    image: str = Field(..., description="Container image, e.g. nginx:1.12")
    namespace: str = Field(..., description="Target namespace, created if missing")


class DeploymentSummary(BaseModel):
    name: str
    replicas: int = Field(0, ge=0)
