# apps/board/client/state.py

import copy

from apps.core.exceptions import NotFound


class ClientBoardState:
    """
    Local, mutable mirror of the board read model

    Holds the same shape the board endpoint returns (columns, each with its
    ordered ``tasks``) and accepts optimistic edits before the server confirms
    them. It has no authority: on any doubt it is thrown away and reloaded.

    Invariant: every task sits in exactly one column list. ``move_task`` is
    the only mutation and always does a single remove followed by a single
    append.
    """

    def __init__(self, board=None):
        self.project = None
        self._columns = []
        self.is_loaded = False
        if board is not None:
            self.load(board)

    def load(self, board):
        """Replaces the whole state with a fresh board (dict or column list)"""
        if isinstance(board, dict):
            self.project = copy.deepcopy(board.get('project'))
            columns = board.get('columns', [])
        else:
            columns = board
        self._columns = copy.deepcopy(list(columns))
        self.is_loaded = True

    @property
    def columns(self):
        return self._columns

    def column(self, column_id):
        for column in self._columns:
            if column['id'] == column_id:
                return column
        raise NotFound(f'Column {column_id} not on this board')

    def column_of(self, task_id):
        """Column currently holding the task, or None"""
        for column in self._columns:
            if any(task['id'] == task_id for task in column['tasks']):
                return column
        return None

    def task(self, task_id):
        column = self.column_of(task_id)
        if column is None:
            raise NotFound(f'Task {task_id} not on this board')
        return next(task for task in column['tasks'] if task['id'] == task_id)

    def task_ids(self):
        return [task['id'] for column in self._columns for task in column['tasks']]

    def snapshot(self):
        """Deep copy of the columns, safe to keep while the state changes"""
        return copy.deepcopy(self._columns)

    def move_task(self, task_id, from_column_id, to_column_id):
        """
        Moves a task to the end of another column (visual only)

        Same column is a no-op: reordering within a column is not tracked.
        The task's ``position`` is left alone; where it lands on the server is
        not decided here.
        """
        if from_column_id == to_column_id:
            return

        source = self.column(from_column_id)
        destination = self.column(to_column_id)

        index = next(
            (i for i, task in enumerate(source['tasks']) if task['id'] == task_id),
            None
        )
        if index is None:
            raise NotFound(f'Task {task_id} is not in column {from_column_id}')

        task = source['tasks'].pop(index)
        task['column_id'] = to_column_id
        destination['tasks'].append(task)

        for column in (source, destination):
            self._refresh_counts(column)

    @staticmethod
    def _refresh_counts(column):
        if 'task_count' not in column:
            return
        column['task_count'] = len(column['tasks'])
        wip_limit = column.get('wip_limit')
        column['over_wip'] = bool(wip_limit) and column['task_count'] > wip_limit

    def as_dict(self):
        return {'project': copy.deepcopy(self.project), 'columns': self.snapshot()}
