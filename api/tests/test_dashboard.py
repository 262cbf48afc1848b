from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_dashboard_stats_empty(client: AsyncClient):
    response = await client.get('/api/dashboard/stats')

    assert response.status_code == 200
    data = response.json()['data']
    assert data['overview'] == {
        'totalFiles': 0, 'recentUploads': 0, 'todayUploads': 0, 'totalStorageUsed': 0,
    }
    assert data['recentFiles'] == []


@pytest.mark.asyncio
async def test_dashboard_stats(client: AsyncClient, make_file):
    now = datetime.utcnow()
    make_file(college_name='IIT Bombay', course_name='B.Tech', file_type='pyq', year='2023',
              file_size=3 * 1024 * 1024, upload_date=now)
    make_file(college_name='IIT Bombay', course_name='B.Tech', file_type='notes', year='2021',
              file_size=1024 * 1024, upload_date=now - timedelta(days=3))
    make_file(college_name='NIT Trichy', course_name='M.Tech', file_type='pyq', year='2022',
              file_size=1024 * 1024, upload_date=now - timedelta(days=30))

    response = await client.get('/api/dashboard/stats')

    body = response.json()
    assert body['success'] is True
    data = body['data']
    assert data['overview']['totalFiles'] == 3
    assert data['overview']['recentUploads'] == 2
    assert data['overview']['todayUploads'] == 1
    assert data['overview']['totalStorageUsed'] == 5.0
    assert data['topColleges'][0] == {'name': 'IIT Bombay', 'count': 2}
    assert data['topCourses'][0] == {'name': 'B.Tech', 'count': 2}
    assert {'type': 'pyq', 'count': 2} in data['filesByType']
    assert [row['year'] for row in data['filesByYear']] == ['2021', '2022', '2023']
    assert [f['collegeName'] for f in data['recentFiles']] == ['IIT Bombay', 'IIT Bombay', 'NIT Trichy']


@pytest.mark.asyncio
async def test_top_colleges_limited_to_five(client: AsyncClient, make_file):
    for i in range(7):
        make_file(college_name=f'College {i}')

    response = await client.get('/api/dashboard/stats')

    assert len(response.json()['data']['topColleges']) == 5
