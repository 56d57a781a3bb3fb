from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base

class Course(Base):
    __tablename__ = "courses"  # course catalogue

    id = Column(Integer, primary_key=True, index=True)       # course ID (PK)
    code = Column(String(20), unique=True, nullable=False)   # course code (e.g. CS301)
    name = Column(String(200), nullable=False)               # course name
    type = Column(String(20), default="theory")              # course type (theory, lab, integrated)

    # ✅ gradable components of this course (1:N)
    test_components = relationship(
        "TestComponent",
        back_populates="course",
        cascade="all, delete-orphan"
    )

    # ✅ students enrolled in this course (1:N)
    enrollments = relationship("Enrollment", back_populates="course")
