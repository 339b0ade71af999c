from pydantic import BaseModel
from app.schemas.user.user import UserBrief
from app.schemas.trip.trip_schema import TripResponse
from app.schemas.trip.collaborator import CollaboratorOut


# An outstanding invitation as shown in the invitee's inbox
class PendingInvitation(BaseModel):
    trip: TripResponse
    owner: UserBrief
    collaboration: CollaboratorOut
