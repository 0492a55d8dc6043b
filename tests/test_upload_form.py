"""Upload panel: typed values outlive closing the panel."""
from firmware_admin.state.list_state import UploadForm
from firmware_ui.upload_form import capture_fields


def test_closing_keeps_typed_values():
    form = UploadForm(is_open=True)
    widgets = {
        "upload_version": "2.1.0",
        "upload_description": "ota fix",
        "upload_device": "dev-2",
    }
    capture_fields(form, widgets)
    form.is_open = False

    assert form.version == "2.1.0"
    assert form.description == "ota fix"
    assert form.device_id == "dev-2"


def test_missing_widgets_keep_form_values():
    form = UploadForm(version="1.0.0", description="first", device_id="dev-1")
    capture_fields(form, {})
    assert (form.version, form.description, form.device_id) == ("1.0.0", "first", "dev-1")


def test_cleared_text_inputs_become_empty_strings():
    form = UploadForm(version="1.0.0", description="first")
    capture_fields(form, {"upload_version": None, "upload_description": "", "upload_device": None})
    assert form.version == ""
    assert form.description == ""
    assert form.device_id is None
