"""
Alert content policy.

Maps an escalation level to what the user sees and hears. Levels 1 and 2
have their own wording; everything from 3 up is treated as urgent.
"""
from dataclasses import dataclass
from server.enums import AlertTone
from server.schemas import PushPayload
from .models import TaskSnapshot

URGENT_LEVEL = 3

# Same pattern the browser client used for its notifications
VIBRATE_PATTERN = [200, 100, 200]


@dataclass(frozen=True)
class VoiceProfile:
    rate: float
    pitch: float
    volume: float = 1.0


VOICES = {
    AlertTone.neutral: VoiceProfile(rate=1.0, pitch=1.0),
    AlertTone.firm: VoiceProfile(rate=1.1, pitch=0.9),
    AlertTone.urgent: VoiceProfile(rate=0.85, pitch=0.7),
}


@dataclass(frozen=True)
class Alert:
    task_id: str
    task_title: str
    level: int
    tone: AlertTone
    title: str
    body: str
    voice: VoiceProfile

    @property
    def tag(self) -> str:
        # Same tag per task, so a newer notification replaces the older one
        return self.task_id

    def to_payload(self) -> PushPayload:
        return PushPayload(
            title=self.title,
            body=self.body,
            tag=self.tag,
            data={
                "taskId": self.task_id,
                "level": self.level,
                "tone": self.tone.value,
                "speech": {
                    "text": self.body,
                    "rate": self.voice.rate,
                    "pitch": self.voice.pitch,
                    "volume": self.voice.volume,
                },
            },
            vibrate=list(VIBRATE_PATTERN),
        )


def tone_for_level(level: int) -> AlertTone:
    if level >= URGENT_LEVEL:
        return AlertTone.urgent
    if level == 2:
        return AlertTone.firm
    return AlertTone.neutral


def build_alert(task: TaskSnapshot, level: int) -> Alert:
    tone = tone_for_level(level)
    title = task.title

    if tone == AlertTone.urgent:
        notification_title = f"URGENT: {title}"
        message = f"Urgent! {title} is overdue. Complete it immediately!"
    elif tone == AlertTone.firm:
        notification_title = title
        message = f"Attention: you have not completed {title}. Please do it now."
    else:
        notification_title = title
        message = f"Reminder: {title}"

    return Alert(
        task_id=task.id,
        task_title=title,
        level=level,
        tone=tone,
        title=notification_title,
        body=message,
        voice=VOICES[tone],
    )
