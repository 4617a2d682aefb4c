# apps/board/client/gateway.py

"""
Task store access for the board client

The move protocol only needs two calls: read the board and update one task.
``HttpTaskStore`` speaks to the JSON API; ``LocalTaskStore`` calls the
services in-process (management commands, tests, server-side automation).
Both report failures with the exceptions of ``apps.core.exceptions``.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager

import httpx
from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.db import DatabaseError

from apps.core.exceptions import NexusFlowError, Forbidden, NotFound, InvalidMove, TransientFailure

logger = logging.getLogger(__name__)


class TaskStoreGateway(ABC):
    """What the board client needs from the task store"""

    @abstractmethod
    async def fetch_board(self):
        """Board read model for the bound project"""

    @abstractmethod
    async def update_task(self, task_id, fields):
        """Applies a partial update and returns the updated task"""


class HttpTaskStore(TaskStoreGateway):
    """
    Gateway over the NexusFlow JSON API

    Transport errors, timeouts and unexpected statuses become
    TransientFailure; 404 becomes NotFound and a 400 ``invalid_move`` becomes
    InvalidMove.
    """

    def __init__(self, base_url, workspace_slug, project_key, client=None, headers=None, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.workspace_slug = workspace_slug
        self.project_key = project_key
        self._headers = headers or {}
        self._timeout = timeout if timeout is not None else getattr(settings, 'NEXUSFLOW_CLIENT_TIMEOUT', 10.0)
        self._client = client
        self._owns_client = client is None

    @property
    def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(headers=self._headers, timeout=self._timeout)
        return self._client

    async def aclose(self):
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    def board_url(self):
        return f"{self.base_url}/api/workspaces/{self.workspace_slug}/projects/{self.project_key}/board/"

    def task_url(self, task_id):
        return f"{self.base_url}/api/workspaces/{self.workspace_slug}/tasks/{task_id}/"

    async def fetch_board(self):
        return await self._request('GET', self.board_url())

    async def update_task(self, task_id, fields):
        body = await self._request('PATCH', self.task_url(task_id), json=fields)
        return body.get('task', body)

    async def _request(self, method, url, **kwargs):
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"⏱️  {method} {url} timed out")
            raise TransientFailure(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            logger.warning(f"🔌 {method} {url} failed: {e}")
            raise TransientFailure(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_success and isinstance(body, dict):
            return body

        message = body.get('error') if isinstance(body, dict) else None
        code = body.get('code') if isinstance(body, dict) else None

        if response.status_code == 404:
            raise NotFound(message)
        if response.status_code == 400 and code == InvalidMove.code:
            raise InvalidMove(message)
        if response.status_code in (401, 403):
            raise Forbidden(message)
        raise TransientFailure(message or f"Unexpected response {response.status_code}")


class LocalTaskStore(TaskStoreGateway):
    """Gateway calling the board services in-process on behalf of ``user``"""

    def __init__(self, user, workspace_slug, project_key):
        self.user = user
        self.workspace_slug = workspace_slug
        self.project_key = project_key

    async def fetch_board(self):
        return await sync_to_async(self._fetch_board)()

    async def update_task(self, task_id, fields):
        return await sync_to_async(self._update_task)(task_id, fields)

    def _fetch_board(self):
        from apps.board.queries import fetch_board

        with store_errors():
            return fetch_board(self.user, self.workspace_slug, self.project_key)

    def _update_task(self, task_id, fields):
        from apps.board import services
        from apps.board.queries import serialize_task

        with store_errors():
            task = services.update_task(self.user, self.workspace_slug, task_id, fields)
            return serialize_task(task)


@contextmanager
def store_errors():
    """Maps database and permission errors onto the client error taxonomy"""
    try:
        yield
    except NexusFlowError:
        raise
    except DatabaseError as e:
        logger.warning(f"🐘 Task store database error: {e}")
        raise TransientFailure(f"Database error: {e}") from e
    except PermissionDenied as e:
        raise Forbidden(str(e) or None) from e
