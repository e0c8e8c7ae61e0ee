from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class SourceType(str, enum.Enum):
    """Origin of a scheduled train row"""
    DISPATCH = "dispatch"
    PLANNING = "planning"
    MANUAL = "manual"


class ProcessStatus(str, enum.Enum):
    """Outcome of processing one source file"""
    DONE = "done"
    FAILED = "failed"


class JobType(str, enum.Enum):
    """Job that wrote a processing log entry"""
    PARSE_IVU_TRAIN_FORMATION_PLANNING = "parse_ivu_train_formation_planning"
