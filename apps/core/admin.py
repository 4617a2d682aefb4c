# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count, Q
from django.utils.html import format_html

from .models import User, Workspace, WorkspaceMember, Project, Column, Task, Activity


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the custom user"""

    list_display = ['username', 'email', 'get_full_name', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {
            'fields': ('avatar_url',)
        }),
    )


class WorkspaceMemberInline(admin.TabularInline):
    model = WorkspaceMember
    extra = 0
    autocomplete_fields = ['user']


@admin.register(Workspace)
class WorkspaceAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'plan', 'members_count', 'created_at']
    list_filter = ['plan']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [WorkspaceMemberInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_members=Count('members'))

    def members_count(self, obj):
        return obj._members

    members_count.short_description = 'Members'


class ColumnInline(admin.TabularInline):
    model = Column
    extra = 0
    fields = ['name', 'order', 'color', 'wip_limit']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['key', 'name', 'workspace', 'task_counter', 'created_at']
    list_filter = ['workspace']
    search_fields = ['name', 'key']
    readonly_fields = ['task_counter', 'created_at', 'updated_at']
    inlines = [ColumnInline]


@admin.register(Column)
class ColumnAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'order', 'wip_badge', 'tasks_count']
    list_filter = ['project']
    ordering = ['project', 'order']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_tasks=Count('tasks', filter=Q(tasks__parent__isnull=True)))

    def tasks_count(self, obj):
        return obj._tasks

    tasks_count.short_description = 'Tasks'

    def wip_badge(self, obj):
        """WIP limit with a red badge when exceeded"""
        if not obj.wip_limit:
            return '-'
        color = '#ef4444' if obj.is_over_wip(obj._tasks) else '#6b7280'
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}/{}</span>',
            color, obj._tasks, obj.wip_limit
        )

    wip_badge.short_description = 'WIP'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['task_key', 'title', 'column', 'position', 'priority', 'assignee', 'updated_at']
    list_filter = ['project', 'status', 'priority']
    search_fields = ['title', 'description']
    list_select_related = ['project', 'column', 'assignee']
    readonly_fields = ['number', 'created_at', 'updated_at']


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'user', 'action', 'entity', 'entity_id', 'workspace']
    list_filter = ['action', 'workspace']
    readonly_fields = ['created_at']
