"""
PYQ Vault - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import AsyncGenerator, Generator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from faker import Faker

# Set testing environment before the app reads it
os.environ['ENV'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['LOG_TO_FILE'] = 'false'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['ADMIN_EMAIL'] = 'admin@pyqvault.test'
os.environ['ADMIN_PASSWORD'] = 'correct-horse-battery'
os.environ['REQUIRE_AUTH'] = 'false'
os.environ['AWS_ACCESS_KEY_ID'] = ''
os.environ['AWS_SECRET_ACCESS_KEY'] = ''
os.environ['S3_BUCKET_NAME'] = ''

from pyqvault.main import app
from pyqvault.config.database import Base, get_db, register_sqlite_functions
from pyqvault.models import college, course, file, saved_file  # noqa: F401
from pyqvault.models.file import File
from pyqvault.models.college import College
from pyqvault.routers import auth as auth_router
from pyqvault.routers import files as files_router

fake = Faker()

ADMIN_EMAIL = os.environ['ADMIN_EMAIL']
ADMIN_PASSWORD = os.environ['ADMIN_PASSWORD']

# In-memory database shared by every connection in a test
test_engine = create_engine(
    'sqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
)
register_sqlite_functions(test_engine)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope='function')
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
async def client(db_session: Session) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


class FakeStorage:
    """Records storage calls instead of talking to S3"""

    def __init__(self):
        self.objects = {}
        self.uploads = []
        self.deletes = []
        self.fail_upload = None
        self.fail_delete = None

    def upload(self, file_content, s3_key, content_type=None):
        if self.fail_upload:
            raise self.fail_upload
        self.objects[s3_key] = file_content.read()
        self.uploads.append({'key': s3_key, 'content_type': content_type})
        return f'https://test-bucket.s3.ap-south-1.amazonaws.com/{s3_key}'

    def delete(self, s3_key):
        self.deletes.append(s3_key)
        if self.fail_delete:
            raise self.fail_delete
        self.objects.pop(s3_key, None)
        return True


@pytest.fixture(autouse=True)
def storage(monkeypatch) -> FakeStorage:
    fake_storage = FakeStorage()
    monkeypatch.setattr(files_router, 'upload_file_to_s3', fake_storage.upload)
    monkeypatch.setattr(files_router, 'delete_file_from_s3', fake_storage.delete)
    return fake_storage


@pytest.fixture(autouse=True)
def reset_login_attempts():
    auth_router.login_attempts.clear()
    yield
    auth_router.login_attempts.clear()


@pytest.fixture
def make_file(db_session: Session):
    """Insert a File row directly; keyword arguments override the defaults"""
    def _make_file(**overrides) -> File:
        name = overrides.pop('file_name', f'{fake.word()}_{fake.random_int(1, 9999)}.pdf')
        values = {
            'college_name': 'Indian Institute of Technology Bombay',
            'course_name': 'B.Tech',
            'year': '2023',
            'branch': 'Computer Science',
            'file_type': 'pyq',
            'file_name': name,
            'original_file_name': name,
            'file_url': f'https://test-bucket.s3.ap-south-1.amazonaws.com/files/{name}',
            'storage_key': f'files/{name}',
            'semester': '3',
            'paper_type': 'normal',
            'file_size': 1024 * 1024,
            'content_type': 'application/pdf',
            'upload_date': datetime.utcnow(),
        }
        values.update(overrides)
        db_file = File(**values)
        db_session.add(db_file)
        db_session.commit()
        db_session.refresh(db_file)
        return db_file
    return _make_file


@pytest.fixture
def college_payload():
    """A valid create-college body with unique name and code"""
    def _payload(**overrides) -> dict:
        suffix = fake.unique.random_int(1000, 99999)
        data = {
            'name': f'{fake.city()} Institute of Technology {suffix}',
            'code': f'it{suffix}',
            'address': fake.street_address(),
            'city': fake.city(),
            'state': 'Maharashtra',
            'type': 'Government',
            'category': 'Technical',
            'establishedYear': 1990,
            'courses': ['B.Tech', 'M.Tech'],
            'branches': ['Computer Science'],
        }
        data.update(overrides)
        return data
    return _payload


@pytest.fixture
def make_college(db_session: Session):
    def _make_college(**overrides) -> College:
        values = {
            'name': f'{fake.company()} College {fake.unique.random_int(1, 99999)}',
            'code': f'C{fake.unique.random_int(1, 99999)}',
            'address': fake.street_address(),
            'city': 'Pune',
            'state': 'Maharashtra',
            'type': 'Private',
            'category': 'Technical',
            'courses': [],
            'branches': [],
            'status': 'active',
            'is_active': True,
        }
        values.update(overrides)
        db_college = College(**values)
        db_session.add(db_college)
        db_session.commit()
        db_session.refresh(db_college)
        return db_college
    return _make_college


@pytest.fixture
async def auth_headers(client: AsyncClient) -> dict:
    response = await client.post(
        '/api/auth/login',
        json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD}
    )
    token = response.json()['access_token']
    return {'Authorization': f'Bearer {token}'}


UPLOAD_FIELDS = {
    'collegeName': 'Indian Institute of Technology Delhi',
    'courseName': 'B.Tech',
    'year': '2022',
    'branch': 'Electrical Engineering',
    'fileType': 'pyq',
    'semester': '5',
    'paperType': 'normal',
}


@pytest.fixture
def upload_fields() -> dict:
    return dict(UPLOAD_FIELDS)
