from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    """Per-IP limit on credential checks."""
    scope = 'login'


class BatchRateThrottle(UserRateThrottle):
    """Per-user limit on archive and analysis runs."""
    scope = 'batch'
