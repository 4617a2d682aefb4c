# apps/__init__.py

"""
NexusFlow - Django applications

- core: tenancy models, permissions, errors
- board: board read model, task moves, realtime channel and the board client
"""

__version__ = '0.1.0'
