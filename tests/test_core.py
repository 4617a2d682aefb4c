# tests/test_core.py

import pytest
from django.contrib import admin
from django.test import Client, RequestFactory

from apps.core.models import Column, Task
from apps.core.permissions import NexusPermissions


@pytest.mark.django_db
def test_health_check():
    response = Client().get('/health/')

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'


@pytest.mark.django_db
def test_workspace_header_on_scoped_urls(api_client, project):
    response = api_client.get('/api/workspaces/acme-team/projects/NEX/board/')

    assert response['X-Workspace'] == 'acme-team'


@pytest.mark.django_db
def test_new_project_gets_default_columns(project):
    columns = list(project.columns.values_list('name', 'order'))

    assert columns == [('Backlog', 0), ('Todo', 1), ('In Progress', 2), ('In Review', 3), ('Done', 4)]


@pytest.mark.django_db
def test_task_key(project, columns, make_task):
    task = make_task('card', columns['Todo'], 1024.0)

    assert task.task_key == f'NEX-{task.number}'
    assert str(task) == f'NEX-{task.number} card'


@pytest.mark.django_db
def test_deleting_column_leaves_task_unplaced(project, columns, make_task):
    task = make_task('card', columns['Todo'], 1024.0)

    columns['Todo'].delete()

    assert Task.objects.get(pk=task.pk).column_id is None


@pytest.mark.parametrize('role, permission, expected', [
    ('OWNER', 'task:delete', True),
    ('MEMBER', 'task:update', True),
    ('MEMBER', 'task:delete', False),
    ('VIEWER', 'task:update', False),
    ('GHOST', 'view:all', False),
])
def test_role_permissions(role, permission, expected):
    assert NexusPermissions.has_permission(role, permission) is expected


@pytest.mark.django_db
def test_can_checks_membership(user, workspace, membership, make_member, django_user_model):
    viewer = make_member('vic', role='VIEWER')
    outsider = django_user_model.objects.create_user(username='mallory', password='secret')

    assert NexusPermissions.can(user, workspace, 'task:update')
    assert not NexusPermissions.can(viewer, workspace, 'task:update')
    assert not NexusPermissions.can(outsider, workspace, 'view:all')


@pytest.mark.django_db
def test_project_access_follows_membership(project, make_member, django_user_model):
    viewer = make_member('vic', role='VIEWER')
    outsider = django_user_model.objects.create_user(username='mallory', password='secret')

    assert NexusPermissions.has_project_access(viewer, project)
    assert not NexusPermissions.has_project_access(outsider, project)


@pytest.mark.django_db
def test_admin_wip_count_ignores_subtasks(user, project, columns, make_task):
    in_progress = columns['In Progress']
    parent = make_task('parent', in_progress, 1024.0)
    make_task('child', in_progress, 2048.0, parent=parent)
    request = RequestFactory().get('/admin/core/column/')
    request.user = user

    column_admin = admin.site._registry[Column]
    row = column_admin.get_queryset(request).get(pk=in_progress.pk)

    assert column_admin.tasks_count(row) == 1


@pytest.mark.django_db
def test_moving_a_task_saves_in_one_query(columns, make_task, django_assert_num_queries):
    task = make_task('card', columns['Todo'], 1024.0)
    task.column = columns['Done']

    with django_assert_num_queries(1):
        task.save()
