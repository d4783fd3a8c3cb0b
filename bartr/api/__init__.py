"""
API Package — FastAPI Routers • Models • JWT Utils • Realtime • Integrations
===========================================================================

Contents
--------
- fast_api
    Router for auth, profiles, swipes and requests, wallet, checkout, AI
    match and the expiry job trigger.
- match_routes
    Router for `/api/matches`: stake, chat, files, submissions, settlement.
- models
    Pydantic request contracts and the AI match result model.
- errors
    Exception taxonomy and the ``{"error", "details"}`` envelope handlers.
- utils
    JWT helpers and the `get_current_user_id` dependency.
- events
    In-process pub/sub broker feeding the WebSocket endpoints.
- ai_match
    Chat-model skill ranking with the overlap fallback.
- payments
    Stripe Checkout session creation and retrieval.
- aws_bucket_funcs
    S3 client, attachment upload and presigned URLs.
"""
