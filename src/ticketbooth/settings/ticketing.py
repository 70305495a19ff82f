from decouple import config

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", default="INR")
FRONTEND_BASE_URL = config("FRONTEND_BASE_URL", default="http://localhost:3000")
QR_CODE_PREFIX = config("QR_CODE_PREFIX", default="EVT")
# 0 disables expiry: an offered waitlist entry stays open until claimed or declined
WAITLIST_OFFER_EXPIRY_HOURS = config("WAITLIST_OFFER_EXPIRY_HOURS", default=0, cast=int)
