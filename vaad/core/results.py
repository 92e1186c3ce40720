"""
core/results.py
───────────────
The `{'success': …}` result dicts returned by every service function, so
views can branch on one shape whether they render HTML or JSON.
"""


def ok(**data):
    return {'success': True, **data}


def failed(logger, action, exc):
    """Log *exc* against *action* and return the failure result."""
    logger.exception('%s failed: %s', action, exc)
    message = getattr(exc, 'message', None) or str(exc) or 'An unknown error occurred'
    return {'success': False, 'error': message}
