# apps/core/management/commands/seed.py

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.board import ranking
from apps.core.models import User, Workspace, WorkspaceMember, Project, Task

DEMO_PASSWORD = 'password123'

USERS = [
    # username, first name, last name, role
    ('alex', 'Alex', 'Johnson', 'OWNER'),
    ('sarah', 'Sarah', 'Chen', 'ADMIN'),
    ('john', 'John', 'Williams', 'MEMBER'),
    ('emily', 'Emily', 'Davis', 'MEMBER'),
]

PROJECTS = {
    'PLT': {
        'name': 'Platform v2.0',
        'description': 'Next-generation platform rebuild with modern architecture',
        'color': '#6366f1',
        'tasks': [
            # title, status, priority, assignee, column, estimate
            ('Set up project structure', 'DONE', 'HIGH', 'alex', 'Done', 3),
            ('Design database schema', 'DONE', 'HIGH', 'sarah', 'Done', 5),
            ('Implement authentication flow', 'DONE', 'URGENT', 'alex', 'Done', 8),
            ('Create workspace management API', 'IN_REVIEW', 'HIGH', 'john', 'In Review', 5),
            ('Build Kanban board with drag and drop', 'IN_PROGRESS', 'HIGH', 'sarah', 'In Progress', 13),
            ('Add real-time collaboration', 'IN_PROGRESS', 'MEDIUM', 'alex', 'In Progress', 8),
            ('Implement notification system', 'TODO', 'MEDIUM', 'emily', 'Todo', 5),
            ('Build analytics dashboard', 'TODO', 'MEDIUM', 'john', 'Todo', 8),
            ('Sprint management module', 'BACKLOG', 'MEDIUM', None, 'Backlog', 8),
            ('Billing integration', 'BACKLOG', 'LOW', None, 'Backlog', 13),
            ('Fix drag and drop performance on mobile', 'IN_PROGRESS', 'HIGH', 'john', 'In Progress', 3),
            ('Add keyboard shortcuts system', 'IN_REVIEW', 'LOW', 'emily', 'In Review', 3),
        ],
    },
    'MOB': {
        'name': 'Mobile App',
        'description': 'iOS & Android mobile application',
        'color': '#f59e0b',
        'tasks': [
            ('Setup mobile project', 'DONE', 'HIGH', 'john', 'Done', 3),
            ('Design mobile UI screens', 'IN_PROGRESS', 'HIGH', 'emily', 'In Progress', 8),
            ('Implement push notifications', 'TODO', 'MEDIUM', 'john', 'Todo', 5),
            ('Offline mode with sync', 'BACKLOG', 'LOW', None, 'Backlog', 13),
            ('Biometric authentication', 'TODO', 'MEDIUM', 'sarah', 'Todo', 5),
        ],
    },
}


class Command(BaseCommand):
    help = 'Creates a demo workspace with users, projects, columns and tasks (idempotent)'

    def add_arguments(self, parser):
        parser.add_argument('--workspace', default='acme-team', help='Slug of the demo workspace')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('🌱 Seeding database...')

        users = self._seed_users()
        workspace = self._seed_workspace(options['workspace'], users)

        for key, data in PROJECTS.items():
            self._seed_project(workspace, key, data, users)

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✅ Demo data ready in workspace "{workspace.slug}"\n'
                f'   Log in as any of {", ".join(u for u, *_ in USERS)} / {DEMO_PASSWORD}\n'
            )
        )

    def _seed_users(self):
        users = {}
        for username, first_name, last_name, _role in USERS:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'first_name': first_name,
                    'last_name': last_name,
                    'email': f'{username}@nexusflow.dev',
                }
            )
            if created:
                user.set_password(DEMO_PASSWORD)
                user.save()
            users[username] = user

        self.stdout.write('  👤 Users ok')
        return users

    def _seed_workspace(self, slug, users):
        workspace, _ = Workspace.objects.get_or_create(
            slug=slug,
            defaults={'name': 'Acme Team', 'plan': 'PRO'}
        )
        for username, _first, _last, role in USERS:
            WorkspaceMember.objects.get_or_create(
                workspace=workspace,
                user=users[username],
                defaults={'role': role}
            )

        self.stdout.write('  🏢 Workspace & members ok')
        return workspace

    def _seed_project(self, workspace, key, data, users):
        project, created = Project.objects.get_or_create(
            workspace=workspace,
            key=key,
            defaults={
                'name': data['name'],
                'description': data['description'],
                'color': data['color'],
                'created_by': users[USERS[0][0]],
            }
        )
        if not created:
            self.stdout.write(f'  ⏭️  Project {key} already exists, skipping tasks')
            return project

        # Default columns come from the post_save signal
        columns = {column.name: column for column in project.columns.all()}
        gap = getattr(settings, 'NEXUSFLOW_POSITION_GAP', ranking.POSITION_GAP)
        last_position = {}

        for number, (title, status, priority, assignee, column_name, estimate) in enumerate(data['tasks'], start=1):
            column = columns[column_name]
            position = ranking.rank_after(last_position.get(column_name), gap)
            last_position[column_name] = position

            Task.objects.create(
                project=project,
                column=column,
                number=number,
                title=title,
                status=status,
                priority=priority,
                estimate=estimate,
                position=position,
                assignee=users.get(assignee) if assignee else None,
                creator=users[USERS[0][0]],
            )

        project.task_counter = len(data['tasks'])
        project.save(update_fields=['task_counter'])

        self.stdout.write(f'  📋 Project {key}: {len(columns)} columns, {len(data["tasks"])} tasks')
        return project
