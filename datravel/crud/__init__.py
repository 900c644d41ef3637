from .travel_order import travel_order
from .director import director
from .time_log import time_log

__all__ = ["travel_order", "director", "time_log"]
