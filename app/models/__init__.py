# SafeTrade - Database Models
# Import all models here for SQLAlchemy discovery

from app.models.safe_zone import SafeZone                     # noqa
from app.models.safe_zone_meeting import SafeZoneMeeting      # noqa
from app.models.safe_zone_review import SafeZoneReview        # noqa
from app.models.listing import Listing                        # noqa
from app.models.user_profile import UserProfile               # noqa
from app.models.stolen_vehicle import StolenVehicle, VinVerification   # noqa
from app.models.conversation import Conversation, Message       # noqa
from app.models.favorite import Favorite                        # noqa
