from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base
from models.courses import Course     # ✅ registered before relationships resolve
from models.students import Student

class Enrollment(Base):
    __tablename__ = "enrollments"  # a student's registration in one course for one term
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "academic_year", name="uq_enrollment_term"),
    )

    id = Column(Integer, primary_key=True, index=True)                        # enrollment ID (PK)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)   # student ID (FK)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)     # course ID (FK)
    academic_year = Column(String(20))                                        # e.g. 2024-25
    semester = Column(Integer)                                                # term number

    student = relationship(Student, back_populates="enrollments")
    course = relationship(Course, back_populates="enrollments")

    # ✅ recorded marks (1:N), never a cached total
    student_marks = relationship(
        "StudentMark",
        back_populates="enrollment",
        cascade="all, delete-orphan"
    )
