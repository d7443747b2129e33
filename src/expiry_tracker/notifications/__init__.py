"""Daily expiry sweep and notification senders."""
