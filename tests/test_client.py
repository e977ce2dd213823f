"""InspectionApiClient against a mocked requests session."""
from unittest.mock import MagicMock

import pytest

from inspection_platform.client import ApiError, InspectionApiClient


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def api(session):
    return InspectionApiClient("http://api.test/", session=session, timeout=5)


def test_create_inspection(api, session):
    session.request.return_value = _response(201, {"inspection": {"inspectionId": "insp_1"}})

    result = api.create_inspection({"propertyAddress": "12 Elm Street"})

    assert result["inspection"]["inspectionId"] == "insp_1"
    session.request.assert_called_once_with(
        "POST", "http://api.test/api/inspections", timeout=5, json={"propertyAddress": "12 Elm Street"}
    )


def test_list_inspections_status_filter(api, session):
    session.request.return_value = _response(200, {"count": 0, "inspections": []})

    api.list_inspections()
    api.list_inspections("DRAFT")

    first, second = session.request.call_args_list
    assert first.kwargs["params"] is None
    assert second.kwargs["params"] == {"status": "DRAFT"}


def test_report_calls(api, session):
    session.request.return_value = _response(200, {"report": {}})

    api.generate_report("insp_1")
    api.get_report("insp_1")

    calls = [(c.args[0], c.args[1]) for c in session.request.call_args_list]
    assert calls == [
        ("POST", "http://api.test/api/reports/insp_1"),
        ("GET", "http://api.test/api/reports/insp_1"),
    ]


def test_error_body_becomes_api_error(api, session):
    session.request.return_value = _response(404, {"error": "Inspection not found"})

    with pytest.raises(ApiError) as exc_info:
        api.get_inspection("insp_missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Inspection not found"


def test_error_without_json_body(api, session):
    session.request.return_value = _response(502)

    with pytest.raises(ApiError) as exc_info:
        api.get_inspection("insp_1")

    assert exc_info.value.message == "API request failed"


def test_upload_image(api, session, tmp_path):
    photo = tmp_path / "roof.png"
    photo.write_bytes(b"\x89PNG fake")
    session.request.return_value = _response(200, {
        "uploadUrl": "https://s3.test/put",
        "s3Key": "inspections/insp_1/img_1.png",
        "imageId": "img_1",
        "expiresIn": 300,
    })
    session.put.return_value = _response(200, {})

    image = api.upload_image("insp_1", photo)

    body = session.request.call_args.kwargs["json"]
    assert body == {
        "inspectionId": "insp_1",
        "fileName": "roof.png",
        "contentType": "image/png",
        "operation": "upload",
    }
    assert session.put.call_args.args[0] == "https://s3.test/put"
    assert session.put.call_args.kwargs["headers"] == {"Content-Type": "image/png"}
    assert image["imageId"] == "img_1"
    assert image["s3Key"] == "inspections/insp_1/img_1.png"
    assert image["description"] == "roof.png"
    assert image["uploadedAt"].endswith("Z")


def test_upload_image_s3_failure(api, session, tmp_path):
    photo = tmp_path / "roof.jpg"
    photo.write_bytes(b"jpeg")
    session.request.return_value = _response(200, {
        "uploadUrl": "https://s3.test/put",
        "s3Key": "inspections/insp_1/img_1.jpg",
        "imageId": "img_1",
    })
    session.put.return_value = _response(403, {})

    with pytest.raises(ApiError, match="Failed to upload image"):
        api.upload_image("insp_1", photo)
