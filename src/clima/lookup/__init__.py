from .dispatcher import (
    DeliveryContext,
    InlineDelivery,
    LookupResult,
    ResultDispatcher,
    SerialDeliveryQueue,
    WeatherObserver,
)
from .executor import FetchExecutor, InFlightFetch
from .manager import WeatherManager

__all__ = [
    "DeliveryContext",
    "FetchExecutor",
    "InFlightFetch",
    "InlineDelivery",
    "LookupResult",
    "ResultDispatcher",
    "SerialDeliveryQueue",
    "WeatherManager",
    "WeatherObserver",
]
