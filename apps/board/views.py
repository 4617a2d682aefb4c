# apps/board/views.py

import json
import logging
from functools import wraps

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.exceptions import NexusFlowError, NotFound, InvalidMove, Forbidden
from apps.core.permissions import api_login_required
from . import services
from .forms import TaskCreateForm, TaskUpdateForm
from .queries import fetch_board, serialize_task

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFound: 404,
    InvalidMove: 400,
    Forbidden: 403,
}


def error_response(message, code, status):
    return JsonResponse({'success': False, 'error': message, 'code': code}, status=status)


def handle_errors(view_func):
    """Translates domain errors into JSON error responses"""

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except NexusFlowError as e:
            logger.warning(f"⚠️  {request.method} {request.path} rejected: {e.message}")
            return error_response(e.message, e.code, ERROR_STATUS.get(type(e), 500))
        except PermissionDenied as e:
            return error_response(str(e) or 'Forbidden', 'forbidden', 403)

    return wrapped_view


def _json_body(request):
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _invalid_payload(form):
    errors = form.errors.get_json_data()
    first = next(iter(errors.values()))[0]['message'] if errors else 'Invalid payload'
    return JsonResponse(
        {'success': False, 'error': first, 'code': 'invalid_payload', 'fields': errors},
        status=400
    )


@require_GET
@api_login_required
@handle_errors
def board_api(request, slug, key):
    """
    Board read model: ordered columns, each with its ordered tasks
    """
    return JsonResponse(fetch_board(request.user, slug, key))


@csrf_exempt  # JSON clients authenticate with the session cookie
@require_POST
@api_login_required
@handle_errors
def create_task_api(request, slug, key):
    """
    Quick add - creates a task at the end of a column
    """
    data = _json_body(request)
    if data is None:
        return error_response('Invalid JSON body', 'invalid_payload', 400)

    form = TaskCreateForm(data)
    if not form.is_valid():
        return _invalid_payload(form)

    task = services.create_task(request.user, slug, key, form.cleaned_data)
    return JsonResponse({'success': True, 'task': serialize_task(task)}, status=201)


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@api_login_required
@handle_errors
def task_api(request, slug, task_id):
    """
    Task detail (GET), partial update (PATCH) and removal (DELETE)

    A PATCH carrying ``column_id`` is how the board persists a drag and drop.
    """
    if request.method == 'GET':
        task = services.get_task(request.user, slug, task_id)
        return JsonResponse({'success': True, 'task': serialize_task(task)})

    if request.method == 'DELETE':
        services.delete_task(request.user, slug, task_id)
        return JsonResponse({'success': True})

    data = _json_body(request)
    if data is None:
        return error_response('Invalid JSON body', 'invalid_payload', 400)

    form = TaskUpdateForm(data)
    if not form.is_valid():
        return _invalid_payload(form)

    task = services.update_task(request.user, slug, task_id, form.changes())
    return JsonResponse({'success': True, 'task': serialize_task(task)})
