"""
Authentication blueprint:
- POST /signup
- POST /signin
- POST /signin/new_token
- GET  /info
- GET  /logout

Access tokens are short-lived JWTs; refresh tokens are opaque strings
stored per device (at most five devices per account).
"""
from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from models.schemas.auth import CredentialsSchema, RefreshRequestSchema, TokenPairSchema
from services.container import current_services
from utils.decorators import jwt_required
from utils.security import derive_device_fingerprint

bp = Blueprint("auth", __name__)

credentials_schema = CredentialsSchema()
refresh_request_schema = RefreshRequestSchema()
token_pair_schema = TokenPairSchema()


def request_fingerprint() -> str:
    """Device fingerprint of the current request (client address + User-Agent)."""
    return derive_device_fingerprint(request.remote_addr, request.headers.get("User-Agent"))


@bp.post("/signup")
def signup():
    """
    Register a new account and open a session on this device.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [id, password]
          properties:
            id: { type: string, description: "email or phone number" }
            password: { type: string, minLength: 6 }
    responses:
      201:
        description: Created (returns accessToken and refreshToken)
      400:
        description: Validation error
      409:
        description: Identifier already registered
    """
    data = credentials_schema.load(request.get_json(silent=True) or {})
    issued = current_services().sessions.register(data["id"], data["password"], request_fingerprint())
    return jsonify(token_pair_schema.dump(issued)), 201


@bp.post("/signin")
def signin():
    """
    Sign in: return accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [id, password]
           properties:
             id: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing fields
      401:
        description: Invalid credentials
    """
    data = credentials_schema.load(request.get_json(silent=True) or {})
    issued = current_services().sessions.login(data["id"], data["password"], request_fingerprint())
    return jsonify(token_pair_schema.dump(issued)), 200


@bp.post("/signin/new_token")
def new_token():
    """
    Use a refresh token to obtain a new access and refresh token (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refreshToken]
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: refreshToken missing
      401:
        description: Unknown or expired refresh token
      404:
        description: Account no longer exists
    """
    data = refresh_request_schema.load(request.get_json(silent=True) or {})
    issued = current_services().sessions.refresh(data["refresh_token"])
    return jsonify(token_pair_schema.dump(issued)), 200


@bp.get("/info")
@jwt_required()
def info():
    """
    Identifier of the signed-in account
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Missing token
      403:
        description: Invalid or expired token
    """
    return jsonify({"identifier": g.identity.identifier}), 200


@bp.get("/logout")
@jwt_required()
def logout():
    """
    Logout: drop the refresh session of this device
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Missing token
    """
    current_services().sessions.logout(g.identity.account_id, request_fingerprint())
    return jsonify({"message": "Logged out successfully"}), 200
