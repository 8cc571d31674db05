from enum import Enum


class UserRole(str, Enum):
    PARTICIPANT = "participant"
    JUDGE = "judge"
    ADMIN = "admin"


class Phase(str, Enum):
    CANVAS = "canvas"
    MVP = "mvp"
    PITCH = "pitch"


class DeliverableType(str, Enum):
    CANVAS_PDF = "canvas_pdf"
    MVP_ONEPAGER_PDF = "mvp_onepager_pdf"
    MVP_LINK = "mvp_link"
    PITCH_PDF = "pitch_pdf"

    @property
    def phase(self) -> Phase:
        return DELIVERABLE_PHASES[self]

    @property
    def is_link(self) -> bool:
        return self is DeliverableType.MVP_LINK


DELIVERABLE_PHASES = {
    DeliverableType.CANVAS_PDF: Phase.CANVAS,
    DeliverableType.MVP_ONEPAGER_PDF: Phase.MVP,
    DeliverableType.MVP_LINK: Phase.MVP,
    DeliverableType.PITCH_PDF: Phase.PITCH,
}
