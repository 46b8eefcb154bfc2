"""SQLAlchemy models for Concierge Ops.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from concierge.models.checklist import ChecklistTemplate, ChecklistTemplateItem, MissionChecklistItem
from concierge.models.contract import Contract
from concierge.models.mission import Mission
from concierge.models.organisation import Organisation
from concierge.models.reservation import Reservation
from concierge.models.revenue import Revenue
from concierge.models.unit import Unit
from concierge.models.user import User

__all__ = [
    "ChecklistTemplate",
    "ChecklistTemplateItem",
    "Contract",
    "Mission",
    "MissionChecklistItem",
    "Organisation",
    "Reservation",
    "Revenue",
    "Unit",
    "User",
]
