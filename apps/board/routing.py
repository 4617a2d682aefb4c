# apps/board/routing.py

from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # Live updates for one project's board
    re_path(r'ws/projects/(?P<project_id>\d+)/board/$', consumers.BoardConsumer.as_asgi()),
]
