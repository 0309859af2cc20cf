from flask import request
from flask_limiter import Limiter


def client_address():
    """First hop of X-Forwarded-For when behind the load balancer, else the socket peer."""
    route = request.access_route
    return route[0] if route else (request.remote_addr or "unknown")


# Configured in app.py via init_app; render callers share a few backend IPs
limiter = Limiter(
    key_func=client_address,
    default_limits=["1000 per day", "120 per hour"],
    storage_uri="memory://"
)
