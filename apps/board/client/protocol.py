# apps/board/client/protocol.py

"""
Drag and drop move protocol

A drop is applied to the local board first and persisted afterwards. Each
drop becomes a ``MoveOperation`` that walks

    LOCAL_APPLIED -> AWAITING_CONFIRMATION -> COMMITTED | ROLLED_BACK

or ends as CANCELLED when the task is dropped outside any target. A failed
update is never retried: the board is reloaded from the store and the user
gets a notice.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from apps.core.exceptions import NexusFlowError, NotFound
from .session import SessionState

logger = logging.getLogger(__name__)


class MovePhase(enum.Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    RECONCILING = 'reconciling'


class MoveStatus(enum.Enum):
    LOCAL_APPLIED = 'local_applied'
    AWAITING_CONFIRMATION = 'awaiting_confirmation'
    COMMITTED = 'committed'
    ROLLED_BACK = 'rolled_back'
    CANCELLED = 'cancelled'


class InvalidTransition(RuntimeError):
    pass


# status -> statuses it may move to
TRANSITIONS = {
    MoveStatus.LOCAL_APPLIED: {MoveStatus.AWAITING_CONFIRMATION},
    MoveStatus.AWAITING_CONFIRMATION: {MoveStatus.COMMITTED, MoveStatus.ROLLED_BACK},
    MoveStatus.COMMITTED: set(),
    MoveStatus.ROLLED_BACK: set(),
    MoveStatus.CANCELLED: set(),
}


@dataclass
class MoveOperation:
    """One task relocation, from the optimistic edit to its settlement"""

    task_id: int
    from_column_id: Optional[int]
    to_column_id: Optional[int]
    status: MoveStatus = MoveStatus.LOCAL_APPLIED
    result: Optional[Dict[str, Any]] = None
    error: Optional[NexusFlowError] = None

    @classmethod
    def cancelled(cls, task_id, from_column_id):
        return cls(task_id, from_column_id, None, status=MoveStatus.CANCELLED)

    @property
    def is_settled(self):
        return not TRANSITIONS[self.status]

    @property
    def changes_column(self):
        return self.to_column_id is not None and self.to_column_id != self.from_column_id

    def _advance(self, status):
        if status not in TRANSITIONS[self.status]:
            raise InvalidTransition(f"Move of task {self.task_id}: {self.status.value} -> {status.value}")
        self.status = status

    def await_confirmation(self):
        self._advance(MoveStatus.AWAITING_CONFIRMATION)

    def commit(self, result):
        self._advance(MoveStatus.COMMITTED)
        self.result = result

    def roll_back(self, error):
        self._advance(MoveStatus.ROLLED_BACK)
        self.error = error


@dataclass
class DragSession:
    """Dragged task and the column it was picked up from"""

    task_id: int
    origin_column_id: int


@dataclass
class MoveProtocol:
    """
    Orchestrates board moves for one client session

    ``state`` is the ClientBoardState being displayed, ``gateway`` any
    TaskStoreGateway. Moves of different tasks are independent; each keeps
    its own operation in ``in_flight`` until the store answers.
    """

    FAILURE_NOTICE = 'Failed to move task'

    state: Any
    gateway: Any
    session: Optional[SessionState] = None
    drag: Optional[DragSession] = None
    in_flight: Dict[int, MoveOperation] = field(default_factory=dict)

    def __post_init__(self):
        if self.session is None:
            self.session = SessionState()

    @property
    def phase(self):
        if self.drag is not None:
            return MovePhase.DRAGGING
        if self.in_flight:
            return MovePhase.RECONCILING
        return MovePhase.IDLE

    async def refresh(self):
        """Loads the board from the store (initial mount or manual reload)"""
        board = await self.gateway.fetch_board()
        self.state.load(board)
        return self.state

    # === Drag lifecycle ===

    def start_drag(self, task_id):
        if self.drag is not None:
            raise RuntimeError(f"Already dragging task {self.drag.task_id}")

        column = self.state.column_of(task_id)
        if column is None:
            raise NotFound(f'Task {task_id} not on this board')

        self.drag = DragSession(task_id, column['id'])
        return self.drag

    def cancel_drag(self):
        """Drop outside any target: nothing is sent, nothing changes"""
        if self.drag is None:
            return None
        operation = MoveOperation.cancelled(self.drag.task_id, self.drag.origin_column_id)
        self.drag = None
        return operation

    def resolve_destination(self, target_id, kind=None):
        """
        Column a drop on ``target_id`` lands in

        A task target resolves to the column holding it, a column target to
        itself. ``kind`` ('task' or 'column') disambiguates ids; without it
        tasks are looked up first.
        """
        if target_id is None:
            return None

        if kind in (None, 'task'):
            column = self.state.column_of(target_id)
            if column is not None:
                return column['id']

        if kind in (None, 'column'):
            for column in self.state.columns:
                if column['id'] == target_id:
                    return column['id']

        return None

    async def drop(self, target_id, kind=None):
        """
        Ends the current drag over ``target_id``

        Applies the move locally, then persists the new column and waits for
        the store. Returns the settled MoveOperation.
        """
        if self.drag is None:
            raise RuntimeError('No drag in progress')

        destination = self.resolve_destination(target_id, kind)
        if destination is None:
            return self.cancel_drag()

        drag, self.drag = self.drag, None

        # The board may have been reloaded while dragging
        current = self.state.column_of(drag.task_id)
        if current is None:
            logger.info(f"🫥 Task {drag.task_id} left the board during the drag, drop ignored")
            return MoveOperation.cancelled(drag.task_id, drag.origin_column_id)

        operation = MoveOperation(drag.task_id, current['id'], destination)

        # Optimistic step, visible before the store answers
        if operation.changes_column:
            self.state.move_task(drag.task_id, drag.origin_column_id, destination)

        operation.await_confirmation()
        self.in_flight[drag.task_id] = operation

        try:
            result = await self.gateway.update_task(drag.task_id, {'column_id': destination})
        except NexusFlowError as e:
            operation.roll_back(e)
            logger.warning(f"↩️  Move of task {drag.task_id} to column {destination} failed ({e.code}): {e.message}")
            await self._reconcile()
        else:
            operation.commit(result)
        finally:
            if self.in_flight.get(drag.task_id) is operation:
                del self.in_flight[drag.task_id]

        return operation

    async def _reconcile(self):
        self.session.notify(self.FAILURE_NOTICE, 'error')
        await self.refresh()
