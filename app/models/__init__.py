from .user.user import User
from .trips.trip_collaborator import TripCollaborator, CollaborationStatus
from .trips.trip_model import Trip
from .expense.expense_models import Expense
