from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.db import get_db
from schemas.marks import MarksUpdate
from schemas.test_components import TestComponentCreate, TestComponentUpdate
from services import marks_service

router = APIRouter(prefix="/marks", tags=["marks"])

# ==========================================================
# [0] Filtered listing
# ==========================================================

# ✅ [READ] marks of every enrollment matching the filters
@router.get("")
def read_marks(
    course_id: Optional[int] = None,
    usn: Optional[str] = None,
    academic_year: Optional[str] = None,
    db: Session = Depends(get_db),
):
    marks = marks_service.list_marks(db, course_id=course_id, usn=usn, academic_year=academic_year)
    return {"success": True, "data": marks}


# ==========================================================
# [1] Course level routes (components, analytics)
# ==========================================================

# ✅ [READ] components of a course
@router.get("/courses/{course_id}/components")
def read_components(course_id: int, db: Session = Depends(get_db)):
    components = marks_service.list_components(db, course_id)
    return {
        "success": True,
        "data": components,
        "message": "Test components fetched"
    }


# ✅ [CREATE] add a component to a course
@router.post("/courses/{course_id}/components", status_code=201)
def create_component(course_id: int, component: TestComponentCreate, db: Session = Depends(get_db)):
    created = marks_service.create_component(db, course_id, component)
    return {
        "success": True,
        "data": created,
        "message": "Test component created"
    }


# ✅ [SUMMARY] course-wide average, band distribution and low performers
@router.get("/courses/{course_id}/summary")
def read_course_summary(
    course_id: int,
    threshold: Optional[float] = Query(None, ge=0, le=100),
    db: Session = Depends(get_db),
):
    summary = marks_service.get_course_summary(db, course_id, threshold)
    return {"success": True, "data": summary}


# ✅ [UPDATE] edit name / type / max / weightage of a component
@router.put("/components/{component_id}")
def update_component(component_id: int, changes: TestComponentUpdate, db: Session = Depends(get_db)):
    updated = marks_service.update_component(db, component_id, changes)
    return {
        "success": True,
        "data": updated,
        "message": "Test component updated"
    }


# ✅ [DELETE] remove a component and every mark recorded against it
@router.delete("/components/{component_id}")
def delete_component(component_id: int, db: Session = Depends(get_db)):
    marks_service.delete_component(db, component_id)
    return {
        "success": True,
        "data": {"test_component_id": component_id},
        "message": "Test component deleted"
    }


# ==========================================================
# [2] Student / enrollment level routes
# ==========================================================

# ✅ [READ] every enrollment of one student
@router.get("/students/{student_id}")
def read_student_marks(student_id: int, db: Session = Depends(get_db)):
    marks = marks_service.get_student_marks(db, student_id)
    return {"success": True, "data": marks}


# ✅ [READ] one enrollment
@router.get("/enrollments/{enrollment_id}")
def read_enrollment_marks(enrollment_id: int, db: Session = Depends(get_db)):
    marks = marks_service.get_enrollment_marks(db, enrollment_id)
    return {"success": True, "data": marks}


# ✅ [UPDATE] record / re-grade marks of one enrollment
@router.put("/enrollments/{enrollment_id}")
def update_enrollment_marks(enrollment_id: int, payload: MarksUpdate, db: Session = Depends(get_db)):
    marks = marks_service.update_marks(db, enrollment_id, payload.marks)
    return {
        "success": True,
        "data": marks,
        "message": "Marks updated successfully"
    }
