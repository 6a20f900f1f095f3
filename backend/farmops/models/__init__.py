"""ORM Models — SQLAlchemy mappings of the Supabase tables this service touches.

Invariants:
    - All models inherit from Base (db/base.py)
    - organization_id is the tenant boundary for every access check

Design Decisions:
    - One file per entity (or per small group of related entities)
    - All models imported here so string-based relationship() references resolve
"""

from farmops.models.organization import OrganizationMember  # noqa: F401
from farmops.models.farm import Farm, Crop  # noqa: F401
from farmops.models.livestock import Livestock  # noqa: F401
from farmops.models.finance import FarmInput, Loan  # noqa: F401
from farmops.models.growth import GrowthStage, GrowthRecord  # noqa: F401
from farmops.models.ai_insight import AIInsight  # noqa: F401
