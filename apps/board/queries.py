# apps/board/queries.py

"""
Board read model

A board is not stored anywhere: it is the project's columns (by ``order``)
each carrying its top-level tasks (by position, created_at, id), rebuilt on
every read.
"""

from django.db.models import Count, Prefetch

from apps.core.exceptions import NotFound
from apps.core.models import Project, Task
from apps.core.permissions import NexusPermissions


def get_project(workspace, project_key):
    """Project by key inside a workspace, or NotFound"""
    try:
        return Project.objects.select_related('workspace').get(workspace=workspace, key=project_key)
    except Project.DoesNotExist:
        raise NotFound('Project not found')


def serialize_task(task):
    """Task as shown on a board card and echoed by the task endpoints"""
    assignee = task.assignee
    return {
        'id': task.id,
        'task_key': task.task_key,
        'number': task.number,
        'title': task.title,
        'status': task.status,
        'priority': task.priority,
        'position': task.position,
        'due_date': task.due_date.isoformat() if task.due_date else None,
        'estimate': task.estimate,
        'column_id': task.column_id,
        'project_id': task.project_id,
        'parent_id': task.parent_id,
        'assignee': {
            'id': assignee.id,
            'name': assignee.display_name,
            'avatar_url': assignee.avatar_url or None,
        } if assignee else None,
        'subtask_count': getattr(task, 'subtask_count', None),
        'created_at': task.created_at.isoformat(),
        'updated_at': task.updated_at.isoformat(),
    }


def serialize_column(column, tasks):
    task_count = len(tasks)
    return {
        'id': column.id,
        'name': column.name,
        'order': column.order,
        'color': column.color,
        'wip_limit': column.wip_limit,
        'task_count': task_count,
        'over_wip': column.is_over_wip(task_count),
        'tasks': [serialize_task(task) for task in tasks],
    }


def build_board(project):
    """Columns with their ordered top-level tasks for an already authorized project"""
    # Prefetch to avoid N+1 queries
    board_tasks = (
        Task.objects
        .filter(parent__isnull=True)
        .select_related('assignee', 'project')
        .annotate(subtask_count=Count('children'))
        .order_by('position', 'created_at', 'id')
    )
    columns = (
        project.columns
        .prefetch_related(Prefetch('tasks', queryset=board_tasks, to_attr='board_tasks'))
        .order_by('order', 'id')
    )

    return {
        'project': {
            'id': project.id,
            'key': project.key,
            'name': project.name,
            'color': project.color,
            'workspace': project.workspace.slug,
        },
        'columns': [serialize_column(column, column.board_tasks) for column in columns],
    }


def fetch_board(user, workspace_slug, project_key):
    """
    Board for a project, as seen by ``user``

    Raises NotFound when the workspace is missing or the user is not a
    member, and when the project does not exist in that workspace.
    """
    workspace, _membership = NexusPermissions.get_membership(user, workspace_slug)
    project = get_project(workspace, project_key)
    return build_board(project)
