"""Fields shared by the user and task schemas."""

from marshmallow import fields

from task_manager.utils import as_utc


class UTCDateTime(fields.DateTime):
    """ISO 8601 datetime dumped with an explicit UTC offset."""

    def __init__(self, **kwargs):
        kwargs.setdefault("format", "iso")
        super().__init__(**kwargs)

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return super()._serialize(as_utc(value), attr, obj, **kwargs)
