from .user import User
from .follow import UserFollow
from .post import Post, PostLike
from .portfolio import Portfolio
from .holding import Holding
from .market_data import MarketData
from .notification import Notification
from .investment_strategy import InvestmentStrategy
