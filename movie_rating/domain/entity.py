from typing import Any, Self

from pydantic import BaseModel, ConfigDict, ValidationError

from movie_rating.exceptions.validation import ValidationException


def field_errors(error: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "__root__"
        cause = item.get("ctx", {}).get("error")
        errors[field] = str(cause) if isinstance(cause, ValueError) else item["msg"]
    return errors


class DomainEntity(BaseModel):
    """
    Immutable domain record.

    Instances are created with `build` and changed with `evolve`; both run the
    full validation and raise ValidationException with a field to message map.
    """

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(cls, **data: Any) -> Self:
        """
        Creates a validated instance.

        :param data: Field values.
        :return: New entity.
        :raises ValidationException: If any field breaks its rules.
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ValidationException(f"Invalid {cls.__name__} data", field_errors(e)) from e

    def evolve(self, **changes: Any) -> Self:
        """
        Copies the entity with some fields replaced, validating the result.

        :param changes: Field values to replace.
        :return: New entity.
        :raises ValidationException: If the result breaks a rule.
        """
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(changes)
        return self.build(**data)
