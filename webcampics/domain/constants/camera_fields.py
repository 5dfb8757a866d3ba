"""Constants for CameraConfig field names in the cameras.json collection"""


class CameraFields:
    """Field name constants for stored camera records"""
    DEVICE_ID = "device_id"
    LOCATION = "location"
    TITLE = "title"
    STATUS = "status"
    ROTATE = "rotate"
    ADD_TITLE = "add_title"
    ADD_TIMESTAMP = "add_timestamp"
    FONT_SIZE = "font_size"
    FONT_COLOR = "font_color"
    FONT_OUTLINE = "font_outline"

    # Older schemas
    LEGACY_MAC = "mac"  # identity field before device_id existed
    LEGACY_ROTATION = "rotation"

    # Collection keys
    KEY_PREFIX = "cam_"
    RESERVED_KEY_PREFIX = "_"  # e.g. "_example_"
