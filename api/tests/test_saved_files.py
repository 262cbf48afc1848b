from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from pyqvault.models.saved_file import SavedFile


@pytest.mark.asyncio
async def test_save_file(client: AsyncClient, make_file):
    db_file = make_file()

    response = await client.post('/api/saved-files', json={
        'fileId': db_file.id, 'category': 'important', 'tags': [' exam ', ''], 'notes': 'revise unit 2',
    })

    assert response.status_code == 201
    saved = response.json()['savedFile']
    assert saved['userId'] == 'default-user'
    assert saved['category'] == 'important'
    assert saved['tags'] == ['exam']
    assert saved['fileId']['id'] == db_file.id
    assert saved['fileId']['fileName'] == db_file.file_name


@pytest.mark.asyncio
async def test_save_file_defaults_to_favorite(client: AsyncClient, make_file):
    db_file = make_file()

    response = await client.post('/api/saved-files', json={'fileId': db_file.id, 'userId': 'student-7'})

    saved = response.json()['savedFile']
    assert saved['category'] == 'favorite'
    assert saved['userId'] == 'student-7'


@pytest.mark.asyncio
async def test_save_file_twice_conflicts(client: AsyncClient, make_file, db_session):
    db_file = make_file()
    await client.post('/api/saved-files', json={'fileId': db_file.id})

    response = await client.post('/api/saved-files', json={'fileId': db_file.id, 'category': 'archive'})

    assert response.status_code == 409
    assert response.json() == {'error': 'File already saved'}
    assert db_session.query(SavedFile).count() == 1


@pytest.mark.asyncio
async def test_same_file_saved_by_two_users(client: AsyncClient, make_file):
    db_file = make_file()

    first = await client.post('/api/saved-files', json={'fileId': db_file.id, 'userId': 'a'})
    second = await client.post('/api/saved-files', json={'fileId': db_file.id, 'userId': 'b'})

    assert first.status_code == second.status_code == 201


@pytest.mark.asyncio
async def test_save_file_errors(client: AsyncClient, make_file):
    db_file = make_file()

    assert (await client.post('/api/saved-files', json={})).status_code == 400
    assert (await client.post('/api/saved-files', json={'fileId': 9999})).status_code == 404
    bad_category = await client.post('/api/saved-files', json={'fileId': db_file.id, 'category': 'later'})
    assert bad_category.status_code == 400
    long_notes = await client.post('/api/saved-files', json={'fileId': db_file.id, 'notes': 'x' * 501})
    assert long_notes.status_code == 400


@pytest.mark.asyncio
async def test_list_saved_files_with_counts(client: AsyncClient, make_file):
    files = [make_file() for _ in range(3)]
    await client.post('/api/saved-files', json={'fileId': files[0].id, 'category': 'important'})
    await client.post('/api/saved-files', json={'fileId': files[1].id, 'category': 'important'})
    await client.post('/api/saved-files', json={'fileId': files[2].id})
    await client.post('/api/saved-files', json={'fileId': files[2].id, 'userId': 'someone-else'})

    response = await client.get('/api/saved-files', params={'category': 'important'})

    data = response.json()
    assert len(data['savedFiles']) == 2
    assert all(s['category'] == 'important' for s in data['savedFiles'])
    assert data['pagination']['totalSaved'] == 2
    assert data['categoryCounts'] == {
        'all': 3, 'important': 2, 'favorite': 1, 'to-review': 0, 'archive': 0,
    }


@pytest.mark.asyncio
async def test_list_saved_files_newest_first(client: AsyncClient, make_file, db_session):
    older, newer = make_file(), make_file()
    now = datetime.utcnow()
    db_session.add_all([
        SavedFile(file_id=older.id, user_id='default-user', saved_at=now - timedelta(hours=2)),
        SavedFile(file_id=newer.id, user_id='default-user', saved_at=now),
    ])
    db_session.commit()

    response = await client.get('/api/saved-files')

    assert [s['fileId']['id'] for s in response.json()['savedFiles']] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_bookmarks_of_deleted_files_are_omitted(client: AsyncClient, make_file):
    kept, removed = make_file(), make_file()
    removed_id = removed.id
    await client.post('/api/saved-files', json={'fileId': kept.id})
    await client.post('/api/saved-files', json={'fileId': removed_id})

    await client.request('DELETE', '/api/files', json={'fileId': removed_id})
    response = await client.get('/api/saved-files')

    saved = response.json()['savedFiles']
    assert [s['fileId']['id'] for s in saved] == [kept.id]


@pytest.mark.asyncio
async def test_list_saved_files_invalid_category(client: AsyncClient):
    response = await client.get('/api/saved-files', params={'category': 'later'})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unsave_by_file_id(client: AsyncClient, make_file, db_session):
    db_file = make_file()
    await client.post('/api/saved-files', json={'fileId': db_file.id, 'userId': 'u1'})

    wrong_user = await client.delete('/api/saved-files', params={'fileId': db_file.id, 'userId': 'u2'})
    response = await client.delete('/api/saved-files', params={'fileId': db_file.id, 'userId': 'u1'})

    assert wrong_user.status_code == 404
    assert response.status_code == 200
    assert db_session.query(SavedFile).count() == 0


@pytest.mark.asyncio
async def test_unsave_errors(client: AsyncClient):
    assert (await client.delete('/api/saved-files')).status_code == 400
    assert (await client.delete('/api/saved-files', params={'fileId': 42})).status_code == 404


@pytest.mark.asyncio
async def test_update_saved_file(client: AsyncClient, make_file):
    db_file = make_file()
    created = await client.post('/api/saved-files', json={'fileId': db_file.id})
    saved_id = created.json()['savedFile']['id']

    response = await client.put(f'/api/saved-files/{saved_id}', json={
        'category': 'to-review', 'tags': ['unit-3'], 'notes': 'check q4',
    })

    assert response.status_code == 200
    saved = response.json()['savedFile']
    assert saved['category'] == 'to-review'
    assert saved['tags'] == ['unit-3']
    assert saved['notes'] == 'check q4'


@pytest.mark.asyncio
async def test_update_saved_file_is_scoped_to_user(client: AsyncClient, make_file):
    db_file = make_file()
    created = await client.post('/api/saved-files', json={'fileId': db_file.id, 'userId': 'owner'})
    saved_id = created.json()['savedFile']['id']

    response = await client.put(f'/api/saved-files/{saved_id}', json={'userId': 'intruder', 'category': 'archive'})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_saved_file_by_id(client: AsyncClient, make_file, db_session):
    db_file = make_file()
    created = await client.post('/api/saved-files', json={'fileId': db_file.id})
    saved_id = created.json()['savedFile']['id']

    response = await client.delete(f'/api/saved-files/{saved_id}')
    again = await client.delete(f'/api/saved-files/{saved_id}')

    assert response.status_code == 200
    assert again.status_code == 404
    assert db_session.query(SavedFile).count() == 0
