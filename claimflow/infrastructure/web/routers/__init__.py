"""
HTTP and websocket routers, mounted under the API prefix by ``claimflow.main``.
"""
