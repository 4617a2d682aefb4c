# tests/test_local_gateway.py

import pytest
from asgiref.sync import async_to_sync

from apps.board.client import ClientBoardState, LocalTaskStore, MoveProtocol, MoveStatus
from apps.core.exceptions import Forbidden, NotFound
from apps.core.models import Task


pytestmark = pytest.mark.django_db


def test_fetch_board(user, project, columns, make_task):
    make_task('card', columns['Todo'], 1024.0)
    store = LocalTaskStore(user, 'acme-team', 'NEX')

    board = async_to_sync(store.fetch_board)()

    assert board['columns'][1]['tasks'][0]['title'] == 'card'


def test_update_task_returns_serialized_task(user, columns, make_task):
    task = make_task('card', columns['Todo'], 1024.0)
    store = LocalTaskStore(user, 'acme-team', 'NEX')

    result = async_to_sync(store.update_task)(task.id, {'column_id': columns['Done'].id})

    assert result['id'] == task.id
    assert result['column_id'] == columns['Done'].id


def test_viewer_update_is_forbidden(columns, make_task, make_member):
    task = make_task('card', columns['Todo'], 1024.0)
    store = LocalTaskStore(make_member('vic', role='VIEWER'), 'acme-team', 'NEX')

    with pytest.raises(Forbidden):
        async_to_sync(store.update_task)(task.id, {'column_id': columns['Done'].id})


def test_end_to_end_move(user, project, columns, make_task):
    task = make_task('card', columns['Backlog'], 1024.0)
    protocol = MoveProtocol(ClientBoardState(), LocalTaskStore(user, 'acme-team', 'NEX'))
    async_to_sync(protocol.refresh)()

    protocol.start_drag(task.id)
    operation = async_to_sync(protocol.drop)(columns['Done'].id, 'column')

    assert operation.status is MoveStatus.COMMITTED
    task.refresh_from_db()
    assert task.column_id == columns['Done'].id
    assert task.position == 1024.0


def test_move_of_deleted_task_rolls_back(user, project, columns, make_task):
    task = make_task('card', columns['Backlog'], 1024.0)
    protocol = MoveProtocol(ClientBoardState(), LocalTaskStore(user, 'acme-team', 'NEX'))
    async_to_sync(protocol.refresh)()
    Task.objects.filter(pk=task.pk).delete()

    protocol.start_drag(task.id)
    operation = async_to_sync(protocol.drop)(columns['Done'].id, 'column')

    assert operation.status is MoveStatus.ROLLED_BACK
    assert isinstance(operation.error, NotFound)
    assert protocol.state.task_ids() == []
    assert protocol.session.pop_notices()[0].message == 'Failed to move task'
