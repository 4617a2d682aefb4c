# apps/core/models.py

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models


class User(AbstractUser):
    """
    Custom user

    Tenancy is expressed through WorkspaceMember rows, never on the user
    itself: one user can belong to several workspaces with different roles.
    """

    avatar_url = models.URLField(blank=True)

    class Meta:
        db_table = 'user'

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    def membership_in(self, workspace):
        """Returns the WorkspaceMember row for this user or None"""
        return self.memberships.filter(workspace=workspace).first()

    def __str__(self):
        return self.display_name


class Workspace(models.Model):
    """Tenant - every project, column and task hangs off one workspace"""

    PLAN_CHOICES = [
        ('FREE', 'Free'),
        ('PRO', 'Pro'),
        ('ENTERPRISE', 'Enterprise'),
    ]

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    plan = models.CharField(max_length=20, choices=PLAN_CHOICES, default='FREE')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'workspace'
        ordering = ['name']

    def __str__(self):
        return self.name


class WorkspaceMember(models.Model):
    """Membership of a user in a workspace, carrying the user's role"""

    ROLE_CHOICES = [
        ('OWNER', 'Owner'),
        ('ADMIN', 'Admin'),
        ('MEMBER', 'Member'),
        ('VIEWER', 'Viewer'),
    ]

    workspace = models.ForeignKey(
        Workspace,
        on_delete=models.CASCADE,
        related_name='members'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='MEMBER')
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'workspace_member'
        unique_together = ['workspace', 'user']

    def __str__(self):
        return f"{self.user} @ {self.workspace} ({self.role})"


class Project(models.Model):
    """Project - owns the columns and tasks of one board"""

    workspace = models.ForeignKey(
        Workspace,
        on_delete=models.CASCADE,
        related_name='projects'
    )
    name = models.CharField(max_length=200)
    key = models.CharField(max_length=10, help_text="Short prefix for task keys, e.g. NEX")
    description = models.TextField(blank=True)
    color = models.CharField(max_length=7, default='#6366f1')
    task_counter = models.PositiveIntegerField(default=0)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='projects_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['-created_at']
        unique_together = ['workspace', 'key']

    def __str__(self):
        return f"{self.key} - {self.name}"

    def create_default_columns(self):
        """Creates the default columns for a new project"""
        for idx, (name, color) in enumerate(settings.NEXUSFLOW_DEFAULT_COLUMNS):
            Column.objects.create(
                project=self,
                name=name,
                color=color,
                order=idx
            )


class Column(models.Model):
    """Board column"""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='columns'
    )
    name = models.CharField(max_length=100)
    order = models.IntegerField(default=0)
    color = models.CharField(max_length=7, default='#6b7280')
    wip_limit = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Advisory work-in-progress cap - empty = no limit"
    )

    class Meta:
        db_table = 'board_column'
        ordering = ['order', 'id']
        unique_together = ['project', 'order']

    def __str__(self):
        return f"{self.name} ({self.project.key})"

    def is_over_wip(self, task_count):
        """Exceeding the WIP limit only changes presentation"""
        return bool(self.wip_limit) and task_count > self.wip_limit


class Task(models.Model):
    """
    Unit of work on a board

    ``position`` ranks the task inside its column. The read path sorts by
    position, then created_at, then id, so equal positions never produce an
    ambiguous order.
    """

    STATUS_CHOICES = [
        ('BACKLOG', 'Backlog'),
        ('TODO', 'Todo'),
        ('IN_PROGRESS', 'In Progress'),
        ('IN_REVIEW', 'In Review'),
        ('DONE', 'Done'),
        ('CANCELLED', 'Cancelled'),
    ]

    PRIORITY_CHOICES = [
        ('URGENT', 'Urgent'),
        ('HIGH', 'High'),
        ('MEDIUM', 'Medium'),
        ('LOW', 'Low'),
        ('NONE', 'None'),
    ]

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    column = models.ForeignKey(
        Column,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks'
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='children'
    )
    number = models.PositiveIntegerField()
    title = models.CharField(max_length=500)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='TODO')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='NONE')
    position = models.FloatField(default=0)
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks'
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='created_tasks'
    )
    due_date = models.DateField(null=True, blank=True)
    estimate = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['position', 'created_at', 'id']
        unique_together = ['project', 'number']
        indexes = [
            models.Index(fields=['column', 'position'], name='task_column_position_idx'),
        ]

    def __str__(self):
        return f"{self.task_key} {self.title}"

    @property
    def task_key(self):
        return f"{self.project.key}-{self.number}"


class Activity(models.Model):
    """Audit trail of task changes"""

    workspace = models.ForeignKey(
        Workspace,
        on_delete=models.CASCADE,
        related_name='activities'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='activities'
    )
    task = models.ForeignKey(
        Task,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    action = models.CharField(max_length=50)
    entity = models.CharField(max_length=50, default='task')
    entity_id = models.CharField(max_length=64)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity'
        ordering = ['-created_at']
        verbose_name_plural = 'activities'

    def __str__(self):
        return f"{self.user} {self.action} {self.entity} {self.entity_id}"
