"""
API package containing versioned routes.

``deps`` holds the FastAPI dependencies shared by every version: they
resolve the store, run the resource existence checks and hand a typed
attachment object to the endpoint.
"""
