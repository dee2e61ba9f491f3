import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class SellPostStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    SOLD = "SOLD"
    EXPIRED = "EXPIRED"
    HIDDEN = "HIDDEN"


class BookCondition(str, enum.Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class OfferStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    COUNTERED = "COUNTERED"
    WITHDRAWN = "WITHDRAWN"


class OfferTurn(str, enum.Enum):
    SELLER = "SELLER"
    BUYER = "BUYER"


class NotificationType(str, enum.Enum):
    NEW_OFFER = "NEW_OFFER"
    OFFER_ACCEPTED = "OFFER_ACCEPTED"
    OFFER_REJECTED = "OFFER_REJECTED"
    OFFER_COUNTERED = "OFFER_COUNTERED"
    OFFER_WITHDRAWN = "OFFER_WITHDRAWN"


OPEN_OFFER_STATUSES = (OfferStatus.PENDING, OfferStatus.COUNTERED)
ACTIVE_OFFER_STATUSES = (OfferStatus.PENDING, OfferStatus.COUNTERED, OfferStatus.ACCEPTED)
OPEN_POST_STATUSES = (SellPostStatus.AVAILABLE, SellPostStatus.PENDING)
