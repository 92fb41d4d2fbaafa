"""
File blueprint. Every route requires a bearer access token and only ever
sees files owned by the token's account.
"""
from __future__ import annotations

from flask import Blueprint, g, jsonify, request, send_file

from models.schemas.file import FileListQuerySchema, FileOutSchema
from services.container import current_services
from services.errors import InvalidInputError
from utils.decorators import jwt_required

bp = Blueprint("files", __name__, url_prefix="/file")

file_out_schema = FileOutSchema()
files_out_schema = FileOutSchema(many=True)
list_query_schema = FileListQuerySchema()


def parse_file_id(raw: str) -> int:
    try:
        file_id = int(raw)
    except ValueError:
        raise InvalidInputError("Invalid file ID")
    if file_id <= 0:
        raise InvalidInputError("Invalid file ID")
    return file_id


def store_uploaded_payload():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise InvalidInputError("No file uploaded")
    return current_services().payloads.save(upload)


@bp.post("/upload")
@jwt_required()
def upload_file():
    """
    Upload a file
    ---
    tags:
      - Files
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: file
        type: file
        required: true
    responses:
      201:
        description: Created (file metadata)
      400:
        description: No file uploaded
      401:
        description: Missing token
    """
    payload = store_uploaded_payload()
    record = current_services().files.upload(g.identity.account_id, payload)
    return jsonify(file_out_schema.dump(record)), 201


@bp.get("/list")
@jwt_required()
def list_files():
    """
    List own files, newest first
    ---
    tags:
      - Files
    security:
      - Bearer: []
    parameters:
      - in: query
        name: list_size
        type: integer
        default: 10
        minimum: 1
        maximum: 100
      - in: query
        name: page
        type: integer
        default: 1
        minimum: 1
    responses:
      200:
        description: Files and pagination
      400:
        description: list_size or page out of range
    """
    query = list_query_schema.load(request.args)
    result = current_services().files.list(g.identity.account_id, query["list_size"], query["page"])
    return jsonify(
        {
            "files": files_out_schema.dump(result.records),
            "pagination": {
                "page": result.page,
                "list_size": result.page_size,
                "total": result.total,
                "total_pages": result.total_pages,
            },
        }
    ), 200


@bp.get("/<file_id>")
@jwt_required()
def get_file(file_id: str):
    """
    Metadata of one file
    ---
    tags:
      - Files
    security:
      - Bearer: []
    parameters:
      - in: path
        name: file_id
        type: integer
        required: true
    responses:
      200:
        description: File metadata
      400:
        description: Invalid file ID
      404:
        description: Not found
    """
    record = current_services().files.get(g.identity.account_id, parse_file_id(file_id))
    return jsonify(file_out_schema.dump(record)), 200


@bp.get("/download/<file_id>")
@jwt_required()
def download_file(file_id: str):
    """
    Download the stored payload
    ---
    tags:
      - Files
    security:
      - Bearer: []
    produces:
      - application/octet-stream
    parameters:
      - in: path
        name: file_id
        type: integer
        required: true
    responses:
      200:
        description: File content
      404:
        description: Not found
    """
    record = current_services().files.locate(g.identity.account_id, parse_file_id(file_id))
    return send_file(
        record.path,
        mimetype=record.mime_type,
        as_attachment=True,
        download_name=record.download_name,
    )


@bp.put("/update/<file_id>")
@jwt_required()
def update_file(file_id: str):
    """
    Replace a file (content and all metadata)
    ---
    tags:
      - Files
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: path
        name: file_id
        type: integer
        required: true
      - in: formData
        name: file
        type: file
        required: true
    responses:
      200:
        description: Updated file metadata
      400:
        description: Invalid file ID or no file uploaded
      404:
        description: Not found
    """
    target_id = parse_file_id(file_id)
    payload = store_uploaded_payload()
    record = current_services().files.update(g.identity.account_id, target_id, payload)
    return jsonify(file_out_schema.dump(record)), 200


@bp.delete("/delete/<file_id>")
@jwt_required()
def delete_file(file_id: str):
    """
    Delete a file
    ---
    tags:
      - Files
    security:
      - Bearer: []
    parameters:
      - in: path
        name: file_id
        type: integer
        required: true
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    current_services().files.delete(g.identity.account_id, parse_file_id(file_id))
    return jsonify({"message": "File deleted successfully"}), 200
