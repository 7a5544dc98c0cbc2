from marshmallow import ValidationError


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def not_blank(value: str) -> None:
    if value is None or not value.strip():
        raise ValidationError("Must not be blank.")


def max_length(limit: int):
    def _validate(value: str) -> None:
        not_blank(value)
        if len(value) > limit:
            raise ValidationError(f"Must be at most {limit} characters.")
    return _validate
