import os

# point the app engine at SQLite before anything imports database.db
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db
from main import app
from models.courses import Course as CourseModel
from models.enrollments import Enrollment as EnrollmentModel
from models.student_marks import StudentMark as StudentMarkModel
from models.students import Student as StudentModel
from models.test_components import TestComponent as ComponentModel

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def seeded(db):
    """
    CS301 with one theory (MSE1, max 20) and one lab (Lab Record, max 30) component.
    Asha has 18 and 21; Ravi has only MSE1 = 6 recorded.
    """
    course = CourseModel(code="CS301", name="Data Structures", type="integrated")
    mse1 = ComponentModel(name="MSE1", type="theory", max_marks=20, weightage=100)
    record = ComponentModel(name="Lab Record", type="lab", max_marks=30, weightage=50)
    course.test_components.extend([mse1, record])

    asha = StudentModel(usn="4NM21CS001", name="Asha", email="asha@example.edu", semester=5)
    ravi = StudentModel(usn="4NM21CS002", name="Ravi", semester=5)
    db.add_all([course, asha, ravi])
    db.flush()

    asha_cs301 = EnrollmentModel(student=asha, course=course, academic_year="2024-25", semester=5)
    ravi_cs301 = EnrollmentModel(student=ravi, course=course, academic_year="2024-25", semester=5)
    db.add_all([asha_cs301, ravi_cs301])
    db.flush()

    db.add_all([
        StudentMarkModel(enrollment=asha_cs301, test_component=mse1, marks_obtained=18),
        StudentMarkModel(enrollment=asha_cs301, test_component=record, marks_obtained=21),
        StudentMarkModel(enrollment=ravi_cs301, test_component=mse1, marks_obtained=6),
    ])
    db.commit()

    return {
        "course": course,
        "mse1": mse1,
        "record": record,
        "asha": asha,
        "ravi": ravi,
        "asha_cs301": asha_cs301,
        "ravi_cs301": ravi_cs301,
    }
