"""
Board client: local board state, session state and the optimistic move protocol
"""

from .gateway import HttpTaskStore, LocalTaskStore, TaskStoreGateway
from .protocol import MoveOperation, MovePhase, MoveProtocol, MoveStatus
from .session import SessionState
from .state import ClientBoardState

__all__ = [
    'ClientBoardState',
    'HttpTaskStore',
    'LocalTaskStore',
    'MoveOperation',
    'MovePhase',
    'MoveProtocol',
    'MoveStatus',
    'SessionState',
    'TaskStoreGateway',
]
