from .company import Company
from .candidate import Candidate
from .job import Job
from .credit_code import CreditCode
from .ledger_entry import LedgerEntry
from .assessment import Assessment
from .notification import Notification
