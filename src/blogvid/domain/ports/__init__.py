from .browser import BrowserObserverPort
from .strategy import ExtractionStrategyPort
from .transport import TransportPort, TransportResponse

__all__ = [
    "BrowserObserverPort",
    "ExtractionStrategyPort",
    "TransportPort",
    "TransportResponse",
]
