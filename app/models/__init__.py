from app.models.tenant import Tenant
from app.models.role import Role
from app.models.restaurant import Restaurant
from app.models.user import User, user_restaurants
from app.models.reservation import Reservation, ReservationStatus
