from .user import User
from .organization import Organization
from .job import Job
from .candidate import Candidate
from .assessment import McqTestResult, TechnicalTestResult
from .interview import InterviewRecord
from .shortlist_outcome import ShortlistOutcome
from .activity_log import ActivityLog
# base and mixins are imported by the above as needed
