import pytest
from sqlalchemy.exc import IntegrityError

from pyqvault.models.course import Course, Subject
from pyqvault.models.saved_file import SavedFile
from pyqvault.models.college import CollegeCreate


def test_saved_file_unique_per_user(db_session):
    db_session.add(SavedFile(file_id=1, user_id='u1'))
    db_session.commit()

    db_session.add(SavedFile(file_id=1, user_id='u1'))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    db_session.add(SavedFile(file_id=1, user_id='u2'))
    db_session.commit()
    assert db_session.query(SavedFile).count() == 2


def test_saved_file_defaults(db_session):
    saved = SavedFile(file_id=5, user_id='u1')
    db_session.add(saved)
    db_session.commit()
    db_session.refresh(saved)

    assert saved.category == 'favorite'
    assert saved.tags == []
    assert saved.saved_at is not None


def test_subject_code_unique_within_course(db_session):
    course = Course(name='Bachelor of Technology', code='BTECH', duration=4, type='undergraduate',
                    category='engineering', total_semesters=8)
    db_session.add(course)
    db_session.commit()

    db_session.add(Subject(name='Data Structures', code='CS201', course_id=course.id, semester=3,
                           credits=4, type='core'))
    db_session.commit()

    db_session.add(Subject(name='Data Structures Lab', code='CS201', course_id=course.id, semester=3,
                           credits=2, type='practical'))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_course_code_unique(db_session):
    db_session.add(Course(name='MBA', code='MBA', duration=2, type='postgraduate',
                          category='management', total_semesters=4))
    db_session.commit()

    db_session.add(Course(name='Master of Business', code='MBA', duration=2, type='postgraduate',
                          category='management', total_semesters=4))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_college_schema_normalizes_input():
    college = CollegeCreate(name='  Test College ', code='tc1', courses=[' B.Tech ', '', 'MBA'])

    assert college.name == 'Test College'
    assert college.code == 'TC1'
    assert college.courses == ['B.Tech', 'MBA']
