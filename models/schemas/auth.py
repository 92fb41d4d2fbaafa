from marshmallow import EXCLUDE, Schema, fields


class CredentialsSchema(Schema):
    """Body of /signup and /signin. Format rules are enforced by the session manager."""

    class Meta:
        unknown = EXCLUDE

    id = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class RefreshRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, data_key="refreshToken")


class TokenPairSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")
