"""
Service layer.

``ResourceStore`` owns the records and their backing file;
``ResourceGateway`` validates requests and maps store results to
response envelopes.  Routers only talk to the gateway.
"""
