# tests/test_board_read_model.py

import pytest

from apps.board.queries import build_board, fetch_board
from apps.core.exceptions import NotFound
from apps.core.models import Column, User


pytestmark = pytest.mark.django_db


def test_empty_project_returns_columns_in_order(user, project):
    board = fetch_board(user, 'acme-team', 'NEX')

    names = [column['name'] for column in board['columns']]
    assert names == ['Backlog', 'Todo', 'In Progress', 'In Review', 'Done']
    assert [column['order'] for column in board['columns']] == [0, 1, 2, 3, 4]
    assert all(column['tasks'] == [] for column in board['columns'])
    assert board['project']['key'] == 'NEX'
    assert board['project']['workspace'] == 'acme-team'


def test_columns_sorted_by_order_not_creation(project):
    project.columns.all().delete()
    Column.objects.create(project=project, name='Last', order=9)
    Column.objects.create(project=project, name='First', order=1)

    board = build_board(project)

    assert [column['name'] for column in board['columns']] == ['First', 'Last']


def test_tasks_sorted_by_position(project, columns, make_task):
    todo = columns['Todo']
    make_task('third', todo, 3072.0)
    make_task('first', todo, 1024.0)
    make_task('second', todo, 2048.0)

    board = build_board(project)
    titles = [task['title'] for task in board['columns'][1]['tasks']]

    assert titles == ['first', 'second', 'third']


def test_equal_positions_fall_back_to_creation_order(project, columns, make_task):
    todo = columns['Todo']
    older = make_task('older', todo, 1024.0)
    newer = make_task('newer', todo, 1024.0)

    tasks = build_board(project)['columns'][1]['tasks']

    assert [task['id'] for task in tasks] == [older.id, newer.id]


def test_subtasks_are_not_placed_on_the_board(project, columns, make_task):
    backlog = columns['Backlog']
    parent = make_task('parent', backlog, 1024.0)
    make_task('child', backlog, 2048.0, parent=parent)

    tasks = build_board(project)['columns'][0]['tasks']

    assert [task['title'] for task in tasks] == ['parent']
    assert tasks[0]['subtask_count'] == 1


def test_task_card_fields(project, columns, make_task, user):
    task = make_task('card', columns['Done'], 1024.0, assignee=user, priority='HIGH')

    card = build_board(project)['columns'][4]['tasks'][0]

    assert card['id'] == task.id
    assert card['task_key'] == f'NEX-{task.number}'
    assert card['column_id'] == columns['Done'].id
    assert card['priority'] == 'HIGH'
    assert card['assignee'] == {'id': user.id, 'name': 'Alex Johnson', 'avatar_url': None}


def test_fetch_twice_gives_same_ordering(user, project, columns, make_task):
    make_task('a', columns['Todo'], 1024.0)
    make_task('b', columns['Todo'], 1024.0)
    make_task('c', columns['Done'], 512.0)

    first = fetch_board(user, 'acme-team', 'NEX')
    second = fetch_board(user, 'acme-team', 'NEX')

    assert first == second


def test_over_wip_is_advisory(project, columns, make_task):
    in_progress = columns['In Progress']
    in_progress.wip_limit = 1
    in_progress.save()
    make_task('one', in_progress, 1024.0)
    make_task('two', in_progress, 2048.0)

    column = build_board(project)['columns'][2]

    assert column['task_count'] == 2
    assert column['over_wip'] is True
    assert len(column['tasks']) == 2


def test_unknown_project_is_not_found(user, project):
    with pytest.raises(NotFound):
        fetch_board(user, 'acme-team', 'NOPE')


def test_non_member_is_not_found(project):
    outsider = User.objects.create_user(username='mallory', password='secret')

    with pytest.raises(NotFound):
        fetch_board(outsider, 'acme-team', 'NEX')
