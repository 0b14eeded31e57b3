from milk_ops.models.order import Order
from milk_ops.models.subscription import Subscription
from milk_ops.models.user_profile import UserAddress, UserProfile
