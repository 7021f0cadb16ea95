from .task import Task, TaskStatus, Submission, utcnow
from .user import User, user_assigned_tasks, user_done_tasks
from .admin import Admin
