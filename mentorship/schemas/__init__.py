from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, SubmissionOut, BulkDeleteOut
from .user import UserCreate, UserSignin, UserUpdate, UserBasic, UserOut
from .admin import AdminCreate, AdminUpdate, AdminSignin, AdminOut
from .tokens import Token
from .curriculum import CurriculumEntry
from .maintenance import ScheduledJob, SchedulerStatus, MaintenanceReportOut
