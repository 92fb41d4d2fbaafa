from datetime import timezone

from marshmallow import EXCLUDE, Schema, fields

DEFAULT_LIST_SIZE = 10


class FileOutSchema(Schema):
    id = fields.Integer()
    name = fields.String()
    extension = fields.String()
    mime_type = fields.String(data_key="mimeType")
    size = fields.Integer()
    upload_date = fields.Method("get_upload_date", data_key="uploadDate")

    def get_upload_date(self, obj):
        value = getattr(obj, "upload_date", None)
        if value is None:
            return None
        # stored as naive UTC
        return value.replace(tzinfo=timezone.utc).isoformat()


class FileListQuerySchema(Schema):
    """Query string of /file/list; range checks happen in the file registry."""

    class Meta:
        unknown = EXCLUDE

    list_size = fields.Integer(load_default=DEFAULT_LIST_SIZE)
    page = fields.Integer(load_default=1)
