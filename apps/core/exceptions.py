# apps/core/exceptions.py

"""
Error taxonomy for board ordering

Services raise these, the JSON views translate them into responses and the
client move protocol treats any of them as a failed durable update.
"""


class NexusFlowError(Exception):
    """Base error - carries a short machine-readable code"""

    code = 'error'
    default_message = 'Unexpected error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(NexusFlowError):
    """Project, task or column does not exist or is not visible to the caller"""

    code = 'not_found'
    default_message = 'Not found'


class InvalidMove(NexusFlowError):
    """Destination column does not belong to the task's project"""

    code = 'invalid_move'
    default_message = 'Column does not belong to this project'


class TransientFailure(NexusFlowError):
    """Network or server failure - retrying the whole operation may succeed"""

    code = 'transient_failure'
    default_message = 'Temporary failure, try again'


class Forbidden(NexusFlowError):
    """Caller is a member but its role does not allow the update"""

    code = 'forbidden'
    default_message = 'Not authorized'
