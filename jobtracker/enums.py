from enum import Enum


class JobStatus(str, Enum):
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    REJECTED = "rejected"


class JobMode(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    REMOTE = "remote"
    HYBRID = "hybrid"


STATUS_VALUES = [s.value for s in JobStatus]
MODE_VALUES = [m.value for m in JobMode]

# Labels used by exports
MODE_LABELS = {
    JobMode.FULL_TIME: "Full Time",
    JobMode.PART_TIME: "Part Time",
    JobMode.CONTRACT: "Contract",
    JobMode.REMOTE: "Remote",
    JobMode.HYBRID: "Hybrid",
}
