"""Host document capability and its BeautifulSoup implementation."""
from .base import HostDocument, IndicatorState
from .soup import SoupDocument

__all__ = ["HostDocument", "IndicatorState", "SoupDocument"]
