"""
services/marks_service.py

DB side of the marks feature: loads an enrollment's components and marks,
hands them to the aggregator and shapes the API responses.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config.settings import settings
from models.courses import Course as CourseModel
from models.enrollments import Enrollment as EnrollmentModel
from models.student_marks import StudentMark as StudentMarkModel
from models.students import Student as StudentModel
from models.test_components import TestComponent as ComponentModel
from schemas.marks import (
    CourseMarksSummary,
    EnrollmentMarks,
    LowPerformer,
    MarkEntry,
    MarkRow,
    StudentHeader,
    StudentMarks,
)
from schemas.test_components import TestComponent as ComponentSchema
from schemas.test_components import TestComponentCreate, TestComponentUpdate
from services.exceptions import NotFoundError, ValidationError
from services.grading import grade_distribution
from services.marks_aggregator import (
    ComponentRow,
    Record,
    StudentMark,
    TestComponent,
    aggregate,
    weighted_score,
)

logger = logging.getLogger(__name__)


# ==========================================================
# [Lookup] shared queries
# ==========================================================

def _get_enrollment(db: Session, enrollment_id: int) -> EnrollmentModel:
    enrollment = db.query(EnrollmentModel).filter(EnrollmentModel.id == enrollment_id).first()
    if enrollment is None:
        logger.warning(f"Enrollment not found: enrollment_id={enrollment_id}")
        raise NotFoundError("Enrollment not found", details={"enrollment_id": enrollment_id})
    return enrollment


def _get_course(db: Session, course_id: int) -> CourseModel:
    course = db.query(CourseModel).filter(CourseModel.id == course_id).first()
    if course is None:
        logger.warning(f"Course not found: course_id={course_id}")
        raise NotFoundError("Course not found", details={"course_id": course_id})
    return course


def _course_components(db: Session, course_id: int) -> List[ComponentModel]:
    return (
        db.query(ComponentModel)
        .filter(ComponentModel.course_id == course_id)
        .order_by(ComponentModel.name, ComponentModel.id)
        .all()
    )


def _to_component(component: ComponentModel) -> TestComponent:
    return TestComponent(
        id=component.id,
        name=component.name,
        category=component.type,
        max_marks=component.max_marks,
        weight=component.weightage,
    )


def load_records(db: Session, enrollment: EnrollmentModel) -> List[Record]:
    """
    Pair every component of the enrollment's course with the student's mark.
    A component without a mark row is paired with None (not graded yet).
    """
    marks_by_component: Dict[int, StudentMarkModel] = {
        m.test_component_id: m for m in enrollment.student_marks
    }
    records: List[Record] = []
    for component in _course_components(db, enrollment.course_id):
        mark = marks_by_component.get(component.id)
        records.append((
            _to_component(component),
            StudentMark(
                enrollment_id=enrollment.id,
                test_component_id=component.id,
                marks_obtained=mark.marks_obtained,
            ) if mark is not None else None,
        ))
    return records


# ==========================================================
# [Read] per-enrollment / per-student marks
# ==========================================================

def _row(row: ComponentRow) -> MarkRow:
    return MarkRow(
        testComponentId=row.test_component_id,
        testName=row.test_name,
        marksObtained=row.marks_obtained,
        maxMarks=row.max_marks,
        weightage=row.weightage,
    )


def summarize_enrollment(db: Session, enrollment: EnrollmentModel) -> EnrollmentMarks:
    records = load_records(db, enrollment)
    result = aggregate(records)
    course = enrollment.course
    return EnrollmentMarks(
        enrollmentId=enrollment.id,
        course_code=course.code if course else None,
        course_name=course.name if course else None,
        course_type=course.type if course else None,
        theoryMarks=[_row(r) for r in result.theory_rows],
        labMarks=[_row(r) for r in result.lab_rows],
        theoryTotal=result.theory_total,
        theoryMax=result.theory_max,
        labTotal=result.lab_total,
        labMax=result.lab_max,
        totalMarks=result.total_marks,
        maxTotalMarks=result.max_total_marks,
        percentage=result.percentage,
        grade=result.grade,
        weightedScore=weighted_score(records, scale=settings.WEIGHTED_SCALE),
    )


def get_enrollment_marks(db: Session, enrollment_id: int) -> EnrollmentMarks:
    return summarize_enrollment(db, _get_enrollment(db, enrollment_id))


def get_student_marks(db: Session, student_id: int) -> StudentMarks:
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        logger.warning(f"Student not found: student_id={student_id}")
        raise NotFoundError("Student not found", details={"student_id": student_id})

    enrollments = (
        db.query(EnrollmentModel)
        .filter(EnrollmentModel.student_id == student_id)
        .order_by(EnrollmentModel.id)
        .all()
    )
    return StudentMarks(
        student=StudentHeader(
            id=student.id,
            usn=student.usn,
            name=student.name,
            email=student.email,
            semester=student.semester,
        ),
        marksData=[summarize_enrollment(db, e) for e in enrollments],
    )


def list_marks(
    db: Session,
    course_id: Optional[int] = None,
    usn: Optional[str] = None,
    academic_year: Optional[str] = None,
) -> List[EnrollmentMarks]:
    """Per-enrollment marks, narrowed by whichever filters are given."""
    query = db.query(EnrollmentModel)
    if course_id is not None:
        query = query.filter(EnrollmentModel.course_id == course_id)
    if usn is not None:
        query = query.join(StudentModel, StudentModel.id == EnrollmentModel.student_id).filter(StudentModel.usn == usn)
    if academic_year is not None:
        query = query.filter(EnrollmentModel.academic_year == academic_year)

    return [summarize_enrollment(db, e) for e in query.order_by(EnrollmentModel.id).all()]


# ==========================================================
# [Write] record marks for one enrollment
# ==========================================================

def update_marks(db: Session, enrollment_id: int, entries: List[MarkEntry]) -> EnrollmentMarks:
    """
    Upsert marks for one enrollment.
    All entries are checked first; nothing is written if any of them is invalid.
    """
    enrollment = _get_enrollment(db, enrollment_id)
    components = {c.id: c for c in _course_components(db, enrollment.course_id)}

    invalid_ids = [e.testComponentId for e in entries if e.testComponentId not in components]
    if invalid_ids:
        raise ValidationError(
            "Invalid test component IDs",
            details={"invalidComponents": invalid_ids},
        )

    seen = set()
    for entry in entries:
        if entry.testComponentId in seen:
            raise ValidationError(
                f"Duplicate marks for test component {entry.testComponentId}",
                details={"test_component_id": entry.testComponentId},
            )
        seen.add(entry.testComponentId)

        component = components[entry.testComponentId]
        score = entry.marksObtained
        if score is not None and not 0 <= score <= component.max_marks:
            raise ValidationError(
                f"Marks obtained ({score}) out of range [0, {component.max_marks}] for {component.name}",
                details={
                    "test_component_id": component.id,
                    "marks_obtained": score,
                    "max_marks": component.max_marks,
                },
            )

    existing = {m.test_component_id: m for m in enrollment.student_marks}
    for entry in entries:
        mark = existing.get(entry.testComponentId)
        if mark is None:
            enrollment.student_marks.append(StudentMarkModel(
                test_component_id=entry.testComponentId,
                marks_obtained=entry.marksObtained,
            ))
        else:
            mark.marks_obtained = entry.marksObtained

    db.commit()
    db.refresh(enrollment)
    logger.info(f"Marks updated: enrollment_id={enrollment_id}, entries={len(entries)}")
    return summarize_enrollment(db, enrollment)


# ==========================================================
# [Components] per-course component definitions
# ==========================================================

def _component_schema(component: ComponentModel) -> ComponentSchema:
    return ComponentSchema(
        id=component.id,
        courseId=component.course_id,
        name=component.name,
        type=component.type,
        maxMarks=component.max_marks,
        weightage=component.weightage,
    )


def list_components(db: Session, course_id: int) -> List[ComponentSchema]:
    _get_course(db, course_id)
    return [_component_schema(c) for c in _course_components(db, course_id)]


def create_component(db: Session, course_id: int, data: TestComponentCreate) -> ComponentSchema:
    _get_course(db, course_id)
    duplicate = (
        db.query(ComponentModel)
        .filter(ComponentModel.course_id == course_id, ComponentModel.name == data.name)
        .first()
    )
    if duplicate is not None:
        raise ValidationError(
            f"Test component '{data.name}' already exists for this course",
            details={"course_id": course_id, "name": data.name},
        )

    component = ComponentModel(
        course_id=course_id,
        name=data.name,
        type=data.type,
        max_marks=data.maxMarks,
        weightage=data.weightage,
    )
    db.add(component)
    db.commit()
    db.refresh(component)
    logger.info(f"Test component created: course_id={course_id}, component_id={component.id}")
    return _component_schema(component)


def _get_component(db: Session, component_id: int) -> ComponentModel:
    component = db.query(ComponentModel).filter(ComponentModel.id == component_id).first()
    if component is None:
        raise NotFoundError("Test component not found", details={"test_component_id": component_id})
    return component


def update_component(db: Session, component_id: int, data: TestComponentUpdate) -> ComponentSchema:
    """
    Administrative edit of a component. Fields left out (or null) keep their value.
    The max cannot drop below a mark already recorded against the component.
    """
    component = _get_component(db, component_id)
    changes = data.model_dump(exclude_none=True)

    new_name = changes.get("name")
    if new_name is not None and new_name != component.name:
        duplicate = (
            db.query(ComponentModel)
            .filter(
                ComponentModel.course_id == component.course_id,
                ComponentModel.name == new_name,
                ComponentModel.id != component.id,
            )
            .first()
        )
        if duplicate is not None:
            raise ValidationError(
                f"Test component '{new_name}' already exists for this course",
                details={"course_id": component.course_id, "name": new_name},
            )

    new_max = changes.get("maxMarks")
    if new_max is not None:
        highest = (
            db.query(func.max(StudentMarkModel.marks_obtained))
            .filter(StudentMarkModel.test_component_id == component.id)
            .scalar()
        )
        if highest is not None and highest > new_max:
            raise ValidationError(
                f"Max marks ({new_max}) below a recorded mark ({highest}) for {component.name}",
                details={
                    "test_component_id": component.id,
                    "max_marks": new_max,
                    "highest_recorded": highest,
                },
            )

    if "name" in changes:
        component.name = changes["name"]
    if "type" in changes:
        component.type = changes["type"]
    if "maxMarks" in changes:
        component.max_marks = changes["maxMarks"]
    if "weightage" in changes:
        component.weightage = changes["weightage"]

    db.commit()
    db.refresh(component)
    logger.info(f"Test component updated: component_id={component_id}, fields={sorted(changes)}")
    return _component_schema(component)


def delete_component(db: Session, component_id: int) -> None:
    component = _get_component(db, component_id)
    db.delete(component)
    db.commit()
    logger.info(f"Test component deleted: component_id={component_id}")


# ==========================================================
# [Analytics] course-wide marks summary
# ==========================================================

def get_course_summary(db: Session, course_id: int, threshold: Optional[float] = None) -> CourseMarksSummary:
    course = _get_course(db, course_id)
    if threshold is None:
        threshold = settings.LOW_PERFORMER_THRESHOLD

    enrollments = (
        db.query(EnrollmentModel)
        .filter(EnrollmentModel.course_id == course_id)
        .order_by(EnrollmentModel.id)
        .all()
    )

    results = []
    for enrollment in enrollments:
        result = aggregate(load_records(db, enrollment))
        results.append((enrollment, result))

    percentages = [r.percentage for _, r in results]
    average = round(sum(percentages) / len(percentages), 1) if percentages else 0.0

    below = [
        LowPerformer(
            enrollmentId=e.id,
            studentId=e.student_id,
            usn=e.student.usn,
            name=e.student.name,
            percentage=r.percentage,
            grade=r.grade,
        )
        for e, r in results
        if r.percentage < threshold
    ]
    below.sort(key=lambda s: s.percentage)

    return CourseMarksSummary(
        courseId=course.id,
        course_code=course.code,
        course_name=course.name,
        enrollments=len(results),
        averagePercentage=average,
        highest=max(percentages) if percentages else None,
        lowest=min(percentages) if percentages else None,
        distribution=grade_distribution(r.grade for _, r in results),
        threshold=threshold,
        belowThreshold=below,
    )
