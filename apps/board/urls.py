# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Board read model
    path('workspaces/<slug:slug>/projects/<str:key>/board/', views.board_api, name='board'),

    # Quick add
    path('workspaces/<slug:slug>/projects/<str:key>/tasks/', views.create_task_api, name='create_task'),

    # Task detail / update (drag and drop) / delete
    path('workspaces/<slug:slug>/tasks/<int:task_id>/', views.task_api, name='task'),
]
