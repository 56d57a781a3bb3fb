from sqlalchemy import Column, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base
from models.enrollments import Enrollment
from models.test_components import TestComponent

class StudentMark(Base):
    __tablename__ = "student_marks"  # one student's score on one component
    __table_args__ = (
        UniqueConstraint("enrollment_id", "test_component_id", name="uq_mark_enrollment_component"),
    )

    id = Column(Integer, primary_key=True, index=True)                                  # mark ID (PK)
    enrollment_id = Column(Integer, ForeignKey("enrollments.id"), nullable=False)       # enrollment ID (FK)
    test_component_id = Column(Integer, ForeignKey("test_components.id"), nullable=False)  # component ID (FK)
    marks_obtained = Column(Float, nullable=True)                                       # NULL = not graded yet

    enrollment = relationship(Enrollment, back_populates="student_marks")
    test_component = relationship(TestComponent, back_populates="student_marks")
