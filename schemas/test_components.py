from pydantic import BaseModel, Field
from typing import Literal, Optional

# ✅ create-only schema (id and courseId come from the URL / DB)
class TestComponentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)     # display name (e.g. MSE1)
    type: Literal["theory", "lab"]                           # category
    maxMarks: float = Field(..., gt=0)                       # maximum achievable score
    weightage: float = Field(100, gt=0)                      # relative contribution


# ✅ read/response schema
class TestComponent(TestComponentCreate):
    id: int
    courseId: int


# ✅ partial update schema (only the fields sent are changed)
class TestComponentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[Literal["theory", "lab"]] = None
    maxMarks: Optional[float] = Field(None, gt=0)
    weightage: Optional[float] = Field(None, gt=0)
