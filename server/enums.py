import enum
# =========================================================
# ENUMS
# =========================================================
class Recurrence(str, enum.Enum):
    none = "none"
    daily = "daily"
    weekdays = "weekdays"
    custom = "custom"

class TaskPriority(str, enum.Enum):
    normal = "normal"
    high = "high"

class AlertTone(str, enum.Enum):
    neutral = "neutral"
    firm = "firm"
    urgent = "urgent"
