# apps/board/services.py

"""
Task store writes

Every write is a point update of one task row (plus a renormalization of a
single column when ranks run out of room). There is no version check:
concurrent updates to the same task resolve as last write wins.
"""

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.db.models import F, Max

from apps.core.exceptions import NotFound, InvalidMove
from apps.core.models import Activity, Column, Project, Task, User
from apps.core.permissions import NexusPermissions
from . import ranking
from .queries import get_project, serialize_task
from .realtime import broadcast_board_event

logger = logging.getLogger(__name__)

# Fields copied as-is from a validated update
PLAIN_FIELDS = ['title', 'description', 'due_date', 'estimate']


def _position_gap():
    return getattr(settings, 'NEXUSFLOW_POSITION_GAP', ranking.POSITION_GAP)


def _require(membership, permission):
    if not NexusPermissions.has_permission(membership.role, permission):
        raise PermissionDenied(f"Role {membership.role} lacks {permission}")


def _log_activity(user, workspace, task, action, details):
    Activity.objects.create(
        workspace=workspace,
        user=user,
        task=task,
        action=action,
        entity='task',
        entity_id=str(task.pk),
        details=details,
    )


def _resolve_assignee(workspace, assignee_id):
    if assignee_id is None:
        return None
    assignee = User.objects.filter(pk=assignee_id, memberships__workspace=workspace).first()
    if assignee is None:
        raise NotFound('Assignee not found')
    return assignee


def get_task(user, workspace_slug, task_id):
    """Task by id, only if it lives in a workspace the user belongs to"""
    workspace, _membership = NexusPermissions.get_membership(user, workspace_slug)
    task = (
        Task.objects
        .select_related('project', 'column', 'assignee')
        .filter(pk=task_id, project__workspace=workspace)
        .first()
    )
    if task is None:
        raise NotFound('Task not found')
    return task


def column_ranks(column, exclude_task_id=None):
    """(task id, position) of the top-level tasks in a column, in board order"""
    tasks = Task.objects.filter(column=column, parent__isnull=True)
    if exclude_task_id is not None:
        tasks = tasks.exclude(pk=exclude_task_id)
    return list(tasks.order_by('position', 'created_at', 'id').values_list('id', 'position'))


def renormalize_column(column, ordered_ids=None):
    """
    Rewrites the column's ranks evenly spaced

    ``ordered_ids`` fixes the resulting order; without it the current board
    order is kept.
    """
    tasks = list(
        Task.objects
        .filter(column=column, parent__isnull=True)
        .order_by('position', 'created_at', 'id')
    )
    if ordered_ids is not None:
        slot = {task_id: i for i, task_id in enumerate(ordered_ids)}
        tasks.sort(key=lambda task: slot.get(task.pk, len(slot)))

    for task, position in zip(tasks, ranking.renormalized(len(tasks), _position_gap())):
        task.position = position
    Task.objects.bulk_update(tasks, ['position'])
    logger.info(f"📐 Column {column.pk} renormalized ({len(tasks)} tasks)")


def update_task(user, workspace_slug, task_id, fields):
    """
    Applies a partial update to one task

    ``fields`` holds only the keys the caller sent. A ``column_id`` that
    differs from the current one is a board move: the destination must exist
    (NotFound) and belong to the same project (InvalidMove). Without
    ``position``/``index`` a moved task keeps its rank.
    """
    workspace, membership = NexusPermissions.get_membership(user, workspace_slug)
    _require(membership, 'task:update')

    with transaction.atomic():
        task = (
            Task.objects
            .select_for_update()
            .select_related('project')
            .filter(pk=task_id, project__workspace=workspace)
            .first()
        )
        if task is None:
            raise NotFound('Task not found')

        previous_column_id = task.column_id
        destination = None

        if 'column_id' in fields:
            destination = Column.objects.filter(pk=fields['column_id']).first()
            if destination is None:
                raise NotFound('Column not found')
            if destination.project_id != task.project_id:
                raise InvalidMove(
                    f"Column {destination.pk} does not belong to project {task.project.key}"
                )
            task.column = destination

        for name in PLAIN_FIELDS:
            if name in fields:
                setattr(task, name, fields[name])

        for name in ('status', 'priority'):
            if fields.get(name):
                setattr(task, name, fields[name])

        if 'assignee_id' in fields:
            task.assignee = _resolve_assignee(workspace, fields['assignee_id'])

        ordered_ids = None
        if fields.get('position') is not None:
            task.position = fields['position']
        elif fields.get('index') is not None and task.column_id is not None:
            ranks = column_ranks(task.column, exclude_task_id=task.pk)
            slot = min(fields['index'], len(ranks))
            task.position = ranking.rank_for_index([p for _, p in ranks], slot, _position_gap())
            ranks.insert(slot, (task.pk, task.position))
            if ranking.needs_renormalization([p for _, p in ranks]):
                ordered_ids = [pk for pk, _ in ranks]

        task.save()

        if ordered_ids is not None:
            renormalize_column(task.column, ordered_ids)
            task.refresh_from_db(fields=['position'])

        moved = task.column_id != previous_column_id
        _log_activity(user, workspace, task, 'moved' if moved else 'updated', _jsonable(fields))

        event_type = 'task_moved' if moved else 'task_updated'
        message = {
            'task': serialize_task(task),
            'from_column_id': previous_column_id,
            'to_column_id': task.column_id,
        }
        project_id = task.project_id
        transaction.on_commit(lambda: broadcast_board_event(project_id, event_type, message, user))

    if moved:
        logger.info(
            f"🔀 {user.username} moved {task.task_key} from column {previous_column_id} to {task.column_id}"
        )
    return task


def create_task(user, workspace_slug, project_key, fields):
    """
    Creates a task at the end of its column

    The column defaults to the project's first one. The per-project number is
    taken from an atomic counter increment.
    """
    workspace, membership = NexusPermissions.get_membership(user, workspace_slug)
    _require(membership, 'task:create')
    project = get_project(workspace, project_key)

    with transaction.atomic():
        Project.objects.filter(pk=project.pk).update(task_counter=F('task_counter') + 1)
        project.refresh_from_db(fields=['task_counter'])

        column_id = fields.get('column_id')
        if column_id is not None:
            column = project.columns.filter(pk=column_id).first()
            if column is None:
                raise NotFound('Column not found')
        else:
            column = project.columns.order_by('order', 'id').first()

        parent = None
        if fields.get('parent_id') is not None:
            parent = project.tasks.filter(pk=fields['parent_id']).first()
            if parent is None:
                raise NotFound('Parent task not found')

        last = None
        if column is not None:
            last = column.tasks.filter(parent__isnull=True).aggregate(last=Max('position'))['last']

        task = Task.objects.create(
            project=project,
            column=column,
            parent=parent,
            number=project.task_counter,
            title=fields['title'],
            description=fields.get('description') or '',
            status=fields.get('status') or 'TODO',
            priority=fields.get('priority') or 'NONE',
            assignee=_resolve_assignee(workspace, fields.get('assignee_id')),
            creator=user,
            due_date=fields.get('due_date'),
            estimate=fields.get('estimate'),
            position=ranking.rank_after(last, _position_gap()),
        )

        _log_activity(user, workspace, task, 'created', {'title': task.title})

        message = {'task': serialize_task(task)}
        transaction.on_commit(lambda: broadcast_board_event(project.pk, 'task_created', message, user))

    logger.info(f"➕ {user.username} created {task.task_key}")
    return task


def delete_task(user, workspace_slug, task_id):
    """Deletes a task (and its subtasks)"""
    workspace, membership = NexusPermissions.get_membership(user, workspace_slug)
    _require(membership, 'task:delete')

    with transaction.atomic():
        task = get_task(user, workspace_slug, task_id)
        project_id = task.project_id
        message = {'task_id': task.pk, 'column_id': task.column_id}

        _log_activity(user, workspace, task, 'deleted', {'task_key': task.task_key})
        task.delete()

        transaction.on_commit(lambda: broadcast_board_event(project_id, 'task_deleted', message, user))

    logger.info(f"🗑️  {user.username} deleted task {task_id}")


def _jsonable(fields):
    """Update payload as stored in Activity.details"""
    return {
        key: value.isoformat() if hasattr(value, 'isoformat') else value
        for key, value in fields.items()
    }
