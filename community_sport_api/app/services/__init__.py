"""
Service layer.

Each service encapsulates the business logic of one domain and is
constructed from the ``AppContext`` of the running application, so
API handlers never talk to the store directly.
"""
