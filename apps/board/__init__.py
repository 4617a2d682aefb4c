# apps/board/__init__.py

"""
Board - NexusFlow Kanban application

Features:
- Board read model (ordered columns and tasks)
- Task moves and quick add over a JSON API
- WebSocket channel relaying board changes
- ``client``: board state mirror and the optimistic move protocol
"""
