from pydantic import BaseModel
from typing import Dict, List, Optional

# ==========================================================
# Response schemas
# ==========================================================

# ✅ one component row in a category table
class MarkRow(BaseModel):
    testComponentId: Optional[int] = None
    testName: str
    marksObtained: Optional[float] = None     # None = not graded yet ("-" on screen)
    maxMarks: float
    weightage: float


# ✅ one enrollment's marks and result
class EnrollmentMarks(BaseModel):
    enrollmentId: int
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    course_type: Optional[str] = None
    theoryMarks: List[MarkRow] = []
    labMarks: List[MarkRow] = []
    theoryTotal: float
    theoryMax: float
    labTotal: float
    labMax: float
    totalMarks: float
    maxTotalMarks: float
    percentage: float
    grade: str
    weightedScore: float                      # weight-normalized blend, informational only


class StudentHeader(BaseModel):
    id: int
    usn: str
    name: str
    email: Optional[str] = None
    semester: Optional[int] = None


class StudentMarks(BaseModel):
    student: StudentHeader
    marksData: List[EnrollmentMarks]


class LowPerformer(BaseModel):
    enrollmentId: int
    studentId: int
    usn: str
    name: str
    percentage: float
    grade: str


class CourseMarksSummary(BaseModel):
    courseId: int
    course_code: str
    course_name: str
    enrollments: int
    averagePercentage: float
    highest: Optional[float] = None
    lowest: Optional[float] = None
    distribution: Dict[str, int]
    threshold: float
    belowThreshold: List[LowPerformer]


# ==========================================================
# Request schemas
# ==========================================================

# ✅ one mark to record; None clears it back to "not graded"
class MarkEntry(BaseModel):
    testComponentId: int
    marksObtained: Optional[float] = None


class MarksUpdate(BaseModel):
    marks: List[MarkEntry]
