# tests/test_task_api.py

import json

import pytest
from django.test import Client

from apps.core.models import Activity, Task


pytestmark = pytest.mark.django_db


def task_url(task_id, slug='acme-team'):
    return f'/api/workspaces/{slug}/tasks/{task_id}/'


def patch(client, url, payload):
    return client.patch(url, data=json.dumps(payload), content_type='application/json')


# === Board ===

def test_board_endpoint(api_client, project, columns, make_task):
    make_task('card', columns['Todo'], 1024.0)

    response = api_client.get('/api/workspaces/acme-team/projects/NEX/board/')

    assert response.status_code == 200
    body = response.json()
    assert [column['name'] for column in body['columns']][:2] == ['Backlog', 'Todo']
    assert body['columns'][1]['tasks'][0]['title'] == 'card'


def test_board_endpoint_unknown_project(api_client, project):
    response = api_client.get('/api/workspaces/acme-team/projects/NOPE/board/')

    assert response.status_code == 404
    assert response.json() == {'success': False, 'error': 'Project not found', 'code': 'not_found'}


def test_board_endpoint_requires_login(project):
    response = Client().get('/api/workspaces/acme-team/projects/NEX/board/')

    assert response.status_code == 401
    assert response.json()['code'] == 'unauthorized'


# === Moves ===

def test_move_updates_column_only(api_client, columns, make_task):
    task = make_task('move me', columns['Backlog'], 1024.0)

    response = patch(api_client, task_url(task.id), {'column_id': columns['Done'].id})

    assert response.status_code == 200
    body = response.json()
    assert body['success'] is True
    assert body['task']['column_id'] == columns['Done'].id
    assert body['task']['position'] == 1024.0

    task.refresh_from_db()
    assert task.column_id == columns['Done'].id
    assert Activity.objects.filter(task=task, action='moved').exists()


def test_move_to_column_of_another_project_is_invalid(api_client, columns, other_project, make_task):
    task = make_task('stay', columns['Backlog'], 1024.0)
    foreign = other_project.columns.first()

    response = patch(api_client, task_url(task.id), {'column_id': foreign.id})

    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_move'
    task.refresh_from_db()
    assert task.column_id == columns['Backlog'].id


def test_move_to_unknown_column(api_client, columns, make_task):
    task = make_task('stay', columns['Backlog'], 1024.0)

    response = patch(api_client, task_url(task.id), {'column_id': 999999})

    assert response.status_code == 404
    assert response.json()['code'] == 'not_found'


def test_move_unknown_task(api_client, columns):
    response = patch(api_client, task_url(999999), {'column_id': columns['Done'].id})

    assert response.status_code == 404


def test_null_column_is_rejected(api_client, columns, make_task):
    task = make_task('stay', columns['Backlog'], 1024.0)

    response = patch(api_client, task_url(task.id), {'column_id': None})

    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_payload'


def test_viewer_cannot_move(columns, make_task, make_member):
    task = make_task('stay', columns['Backlog'], 1024.0)
    viewer = make_member('vic', role='VIEWER')
    client = Client()
    client.force_login(viewer)

    response = patch(client, task_url(task.id), {'column_id': columns['Done'].id})

    assert response.status_code == 403
    assert response.json()['code'] == 'forbidden'


def test_non_member_gets_not_found(columns, make_task, django_user_model):
    task = make_task('stay', columns['Backlog'], 1024.0)
    outsider = django_user_model.objects.create_user(username='mallory', password='secret')
    client = Client()
    client.force_login(outsider)

    response = patch(client, task_url(task.id), {'column_id': columns['Done'].id})

    assert response.status_code == 404


def test_same_column_patch_is_an_update(api_client, columns, make_task):
    task = make_task('stay', columns['Todo'], 1024.0)

    response = patch(api_client, task_url(task.id), {'column_id': columns['Todo'].id})

    assert response.status_code == 200
    assert Activity.objects.filter(task=task, action='updated').exists()
    assert not Activity.objects.filter(task=task, action='moved').exists()


def test_move_broadcasts_after_commit(api_client, columns, make_task, monkeypatch, django_capture_on_commit_callbacks):
    sent = []
    monkeypatch.setattr(
        'apps.board.services.broadcast_board_event',
        lambda project_id, event_type, message, user=None: sent.append((project_id, event_type, message))
    )
    task = make_task('move me', columns['Backlog'], 1024.0)

    with django_capture_on_commit_callbacks(execute=True):
        patch(api_client, task_url(task.id), {'column_id': columns['Done'].id})

    assert len(sent) == 1
    project_id, event_type, message = sent[0]
    assert event_type == 'task_moved'
    assert message['from_column_id'] == columns['Backlog'].id
    assert message['to_column_id'] == columns['Done'].id


# === Ranked placement ===

def test_index_places_task_between_neighbours(api_client, project, columns, make_task):
    todo = columns['Todo']
    a = make_task('a', todo, 1024.0)
    b = make_task('b', todo, 2048.0)
    c = make_task('c', todo, 3072.0)

    response = patch(api_client, task_url(c.id), {'index': 1})

    assert response.status_code == 200
    order = list(Task.objects.filter(column=todo).order_by('position').values_list('id', flat=True))
    assert order == [a.id, c.id, b.id]


def test_index_with_column_change(api_client, columns, make_task):
    done = columns['Done']
    first = make_task('first', done, 1024.0)
    moved = make_task('moved', columns['Todo'], 5000.0)

    response = patch(api_client, task_url(moved.id), {'column_id': done.id, 'index': 0})

    assert response.status_code == 200
    order = list(Task.objects.filter(column=done).order_by('position').values_list('id', flat=True))
    assert order == [moved.id, first.id]


def test_crowded_column_is_renormalized(api_client, columns, make_task):
    todo = columns['Todo']
    a = make_task('a', todo, 1.0)
    b = make_task('b', todo, 1.0 + 1e-9)
    c = make_task('c', todo, 10.0)

    response = patch(api_client, task_url(c.id), {'index': 1})

    assert response.status_code == 200
    rows = list(Task.objects.filter(column=todo).order_by('position').values_list('id', 'position'))
    assert [row[0] for row in rows] == [a.id, c.id, b.id]
    assert [row[1] for row in rows] == [1024.0, 2048.0, 3072.0]
    assert response.json()['task']['position'] == 2048.0


def test_tied_neighbours_keep_requested_slot(api_client, columns, make_task):
    todo = columns['Todo']
    a = make_task('a', todo, 5.0)
    b = make_task('b', todo, 5.0)
    c = make_task('c', todo, 10.0)

    response = patch(api_client, task_url(c.id), {'index': 1})

    assert response.status_code == 200
    rows = list(Task.objects.filter(column=todo).order_by('position').values_list('id', 'position'))
    assert [row[0] for row in rows] == [a.id, c.id, b.id]
    assert [row[1] for row in rows] == [1024.0, 2048.0, 3072.0]


def test_position_and_index_together_rejected(api_client, columns, make_task):
    task = make_task('stay', columns['Todo'], 1024.0)

    response = patch(api_client, task_url(task.id), {'position': 5.0, 'index': 0})

    assert response.status_code == 400


# === Other task operations ===

def test_get_task(api_client, columns, make_task):
    task = make_task('detail', columns['Todo'], 1024.0)

    response = api_client.get(task_url(task.id))

    assert response.status_code == 200
    assert response.json()['task']['title'] == 'detail'


def test_partial_update_keeps_other_fields(api_client, columns, make_task):
    task = make_task('old', columns['Todo'], 1024.0, priority='HIGH')

    response = patch(api_client, task_url(task.id), {'title': '  new  '})

    assert response.status_code == 200
    task.refresh_from_db()
    assert task.title == 'new'
    assert task.priority == 'HIGH'
    assert task.column_id == columns['Todo'].id


def test_empty_title_rejected(api_client, columns, make_task):
    task = make_task('old', columns['Todo'], 1024.0)

    response = patch(api_client, task_url(task.id), {'title': '   '})

    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_payload'


def test_invalid_json_body(api_client, columns, make_task):
    task = make_task('old', columns['Todo'], 1024.0)

    response = api_client.patch(task_url(task.id), data='not json', content_type='application/json')

    assert response.status_code == 400


def test_create_appends_to_column(api_client, project, columns, make_task):
    make_task('existing', columns['Todo'], 2048.0)

    response = api_client.post(
        '/api/workspaces/acme-team/projects/NEX/tasks/',
        data=json.dumps({'title': 'New card', 'column_id': columns['Todo'].id}),
        content_type='application/json'
    )

    assert response.status_code == 201
    task = response.json()['task']
    assert task['position'] == 3072.0
    assert task['column_id'] == columns['Todo'].id
    project.refresh_from_db()
    assert task['task_key'] == f'NEX-{project.task_counter}'


def test_create_defaults_to_first_column(api_client, columns):
    response = api_client.post(
        '/api/workspaces/acme-team/projects/NEX/tasks/',
        data=json.dumps({'title': 'Inbox'}),
        content_type='application/json'
    )

    assert response.status_code == 201
    assert response.json()['task']['column_id'] == columns['Backlog'].id
    assert response.json()['task']['position'] == 1024.0


def test_delete_task(api_client, columns, make_task):
    task = make_task('gone', columns['Todo'], 1024.0)

    response = api_client.delete(task_url(task.id))

    assert response.status_code == 200
    assert not Task.objects.filter(pk=task.id).exists()
    assert Activity.objects.filter(action='deleted').exists()


def test_unsupported_method(api_client, columns, make_task):
    task = make_task('stay', columns['Todo'], 1024.0)

    response = api_client.post(task_url(task.id))

    assert response.status_code == 405
