"""Admin console: resource-agnostic list and mutation controllers for the admin API."""
from .client import PagedResult, ResourceClient, ResourceError, ServerError, TransportError, ValidationError
from .listing import ListController
from .mutations import MutationController
from .notices import Notice, NoticeBoard
from .pagination import page_window
from .resources import COUPONS, ORDERS, USERS, CouponForm, Resource
from .screens import AdminScreen, open_session
from .state import ListState
