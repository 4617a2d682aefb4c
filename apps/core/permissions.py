# apps/core/permissions.py

from functools import wraps

from django.http import JsonResponse

from .exceptions import NotFound


# Role -> granted permissions
ROLE_PERMISSIONS = {
    'OWNER': {
        'workspace:manage', 'workspace:billing', 'workspace:delete',
        'members:manage', 'project:create', 'project:delete',
        'task:create', 'task:delete', 'task:update',
        'comment:create', 'label:manage', 'sprint:manage',
        'integration:manage', 'view:all',
    },
    'ADMIN': {
        'workspace:manage', 'members:manage',
        'project:create', 'project:delete',
        'task:create', 'task:delete', 'task:update',
        'comment:create', 'label:manage', 'sprint:manage',
        'integration:manage', 'view:all',
    },
    'MEMBER': {
        'project:create', 'task:create', 'task:update',
        'comment:create', 'label:manage', 'sprint:manage', 'view:all',
    },
    'VIEWER': {'comment:create', 'view:all'},
}


class NexusPermissions:
    """
    Workspace role based permissions

    Access to anything inside a workspace starts with membership; a
    non-member gets NotFound rather than a permission error so that
    workspace slugs are not leaked.
    """

    @staticmethod
    def has_permission(role, permission):
        """Checks whether a role grants a permission"""
        return permission in ROLE_PERMISSIONS.get(role, set())

    @staticmethod
    def get_membership(user, workspace_slug):
        """
        Resolves (workspace, membership) for the user

        Raises NotFound when the workspace does not exist or the user is not
        one of its members.
        """
        from .models import WorkspaceMember

        if not user.is_authenticated:
            raise NotFound('Workspace not found')

        membership = (
            WorkspaceMember.objects
            .select_related('workspace')
            .filter(workspace__slug=workspace_slug, user=user)
            .first()
        )
        if membership is None:
            raise NotFound('Workspace not found')
        return membership.workspace, membership

    @staticmethod
    def can(user, workspace, permission):
        """Checks a permission for the user inside a workspace"""
        if not user.is_authenticated:
            return False
        membership = user.membership_in(workspace)
        if membership is None:
            return False
        return NexusPermissions.has_permission(membership.role, permission)

    @staticmethod
    def has_project_access(user, project):
        """Any member of the owning workspace can read its boards"""
        return NexusPermissions.can(user, project.workspace, 'view:all')


# Decorators for JSON views

def api_login_required(view_func):
    """Like login_required, but answers 401 JSON instead of redirecting"""

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse(
                {'success': False, 'error': 'Unauthorized', 'code': 'unauthorized'},
                status=401
            )
        return view_func(request, *args, **kwargs)

    return wrapped_view
