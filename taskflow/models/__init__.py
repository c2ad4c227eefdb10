from .status import TaskStatus, OPEN_FOR_PROPOSALS
from .user import User, Role
from .task import Task, TaskCategory
from .proposal import TaskProposal
from .comment import Comment
