"""
HTTP API for the claim engine:
- POST /commitments - Publish a Merkle root
- GET  /commitments[/{id}] - Read commitments
- POST /commitments/{id}/active - Activate or deactivate
- POST /claims - Claim / fulfill against a commitment
- GET  /commitments/{id}/claims/{identity} - Consumption status
- GET  /health - Health check

Usage:
    uvicorn api.app:create_app --factory --reload
"""

__version__ = "0.1.0"
