from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # student master data

    id = Column(Integer, primary_key=True, index=True)              # student ID (PK)
    usn = Column(String(20), unique=True, nullable=False)           # university seat number
    name = Column(String(100), nullable=False)                      # student name
    email = Column(String(100))                                     # email
    semester = Column(Integer)                                      # current semester

    # ✅ course registrations of this student (1:N)
    enrollments = relationship("Enrollment", back_populates="student")
