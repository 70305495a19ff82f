from decouple import config

STRIPE_SECRET_KEY = config("STRIPE_SECRET_KEY", default="sk_test_...")
STRIPE_PUBLISHABLE_KEY = config("STRIPE_PUBLISHABLE_KEY", default="pk_test_...")
STRIPE_WEBHOOK_SECRET = config("STRIPE_WEBHOOK_SECRET", default="whsec_...")
# How many recent sessions to scan when a verification request carries no session id
STRIPE_SESSION_LOOKUP_LIMIT = config("STRIPE_SESSION_LOOKUP_LIMIT", default=50, cast=int)
