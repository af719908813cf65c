"""
Client for the Pesapal v3 payment gateway.

Use :func:`gateway.client.get_gateway` to obtain the process-wide
instance; tests swap it out with :func:`gateway.client.reset_gateway`.
"""
