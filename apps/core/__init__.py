# apps/core/__init__.py

"""
Core - NexusFlow base application

Contains:
- Models for workspaces, projects, columns and tasks
- Workspace role permissions
- Error taxonomy shared by the board services and the client
- Demo data seed command
"""
