# tests/conftest.py

import pytest
from django.test import Client

from apps.core.models import User, Workspace, WorkspaceMember, Project, Column, Task


@pytest.fixture
def user(db):
    return User.objects.create_user(username='alex', password='secret', first_name='Alex', last_name='Johnson')


@pytest.fixture
def workspace(db):
    return Workspace.objects.create(name='Acme Team', slug='acme-team', plan='PRO')


@pytest.fixture
def membership(user, workspace):
    return WorkspaceMember.objects.create(workspace=workspace, user=user, role='OWNER')


@pytest.fixture
def make_member(workspace):
    def _make(username, role='MEMBER'):
        member = User.objects.create_user(username=username, password='secret')
        WorkspaceMember.objects.create(workspace=workspace, user=member, role=role)
        return member
    return _make


@pytest.fixture
def project(workspace, user, membership):
    """Project with the default columns (created by the post_save signal)"""
    return Project.objects.create(workspace=workspace, name='NexusFlow', key='NEX', created_by=user)


@pytest.fixture
def columns(project):
    return {column.name: column for column in project.columns.all()}


@pytest.fixture
def make_task(project, user):
    def _make(title, column, position, **extra):
        project.task_counter += 1
        project.save(update_fields=['task_counter'])
        return Task.objects.create(
            project=project,
            column=column,
            number=project.task_counter,
            title=title,
            position=position,
            creator=user,
            **extra
        )
    return _make


@pytest.fixture
def other_project(workspace, user, membership):
    other = Project.objects.create(workspace=workspace, name='Mobile', key='MOB', created_by=user)
    return other


@pytest.fixture
def api_client(user, membership):
    client = Client()
    client.force_login(user)
    return client


def board_columns(columns):
    """Plain in-memory board: names -> task ids, for client state tests"""
    board = []
    for column_id, (name, task_ids) in enumerate(columns, start=1):
        board.append({
            'id': column_id,
            'name': name,
            'order': column_id - 1,
            'tasks': [{'id': task_id, 'title': f'T{task_id}', 'column_id': column_id} for task_id in task_ids],
        })
    return {'project': {'id': 1, 'key': 'NEX'}, 'columns': board}


@pytest.fixture
def sample_board():
    """Backlog: [T1], Todo: [], Done: []"""
    return board_columns([('Backlog', [1]), ('Todo', []), ('Done', [])])


@pytest.fixture
def make_board():
    return board_columns
