"""Request body schemas.

Each schema is a pydantic model keyed by the camelCase names clients send.
``parse`` validates a decoded JSON body and turns the first pydantic error
into a ``ValidationError`` carrying the message registered for that field.
Nothing here touches the database.
"""
from typing import Annotated, Any, ClassVar, List, Optional

from flask import request
from pydantic import (
    BaseModel, ConfigDict, Field, StrictBool, StringConstraints, field_validator, model_validator,
)
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from errors import ValidationError
from models import INT_MAX, Difficulty

MIN_PASSWORD_LENGTH = 6

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Username = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=3, max_length=80)]
Email = Annotated[str, StringConstraints(
    strip_whitespace=True, to_lower=True, max_length=200, pattern=r'^[^@\s]+@[^@\s]+$',
)]
Password = Annotated[str, StringConstraints(min_length=MIN_PASSWORD_LENGTH)]
Secret = Annotated[str, StringConstraints(min_length=1)]

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Text = Annotated[str, StringConstraints(strip_whitespace=True)]
Url = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
Steps = Annotated[List[Any], Field(min_length=1)]
Minutes = Annotated[int, Field(ge=0, le=INT_MAX)]
Servings = Annotated[int, Field(ge=1, le=INT_MAX)]
Rating = Annotated[int, Field(ge=1, le=5)]

TOO_LARGE = ('less_than_equal', 'int_parsing_size')


def _too_large(**labels):
    return {
        (field, kind): f'{label} must be at most {INT_MAX}'
        for field, label in labels.items() for kind in TOO_LARGE
    }


def json_body():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _is_missing(error):
    if error['type'] == 'missing' or error.get('input') is None:
        return True
    value = error.get('input')
    return isinstance(value, str) and not value.strip()


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Field alias, or (alias, pydantic error type), to client-facing message.
    # 'required' covers any missing or blank field.
    error_messages: ClassVar[dict] = {}

    @classmethod
    def message_for(cls, error):
        field = error['loc'][0] if error['loc'] else None
        messages = cls.error_messages
        if _is_missing(error) and 'required' in messages:
            return messages['required']
        return messages.get((field, error['type'])) or messages.get(field) or error['msg']

    @classmethod
    def parse(cls, payload):
        try:
            return cls.model_validate(payload)
        except SchemaError as exc:
            errors = exc.errors(include_url=False)
            # Missing fields are reported before malformed ones.
            errors.sort(key=lambda e: not _is_missing(e))
            details = ['{}: {}'.format('.'.join(str(p) for p in e['loc']), e['msg']) for e in errors]
            raise ValidationError(cls.message_for(errors[0]), details) from None


class RegisterInput(RequestModel):
    email: Email
    password: Password
    first_name: Name
    last_name: Name
    username: Optional[Username] = None

    error_messages = {
        'required': 'Email, password, firstName, and lastName are required',
        'email': 'Invalid email address',
        'password': 'Password must be at least 6 characters',
        'firstName': 'firstName must be a string of at most 100 characters',
        'lastName': 'lastName must be a string of at most 100 characters',
        'username': 'Username must be between 3 and 80 characters',
    }

    @field_validator('username', mode='before')
    @classmethod
    def optional_username(cls, value):
        return _blank_to_none(value)

    @model_validator(mode='after')
    def derive_username(self):
        if self.username is None:
            local_part = self.email.split('@')[0]
            if not 3 <= len(local_part) <= 80:
                raise PydanticCustomError('username_length', 'Username must be between 3 and 80 characters')
            self.username = local_part
        return self


class LoginInput(RequestModel):
    email: Optional[Text] = None
    username: Optional[Text] = None
    password: Secret

    error_messages = {
        'required': 'Email/username and password are required',
        'email': 'Email/username and password are required',
        'username': 'Email/username and password are required',
        'password': 'Email/username and password are required',
    }

    @model_validator(mode='after')
    def needs_identifier(self):
        if not self.identifier:
            raise PydanticCustomError('missing', 'Email/username and password are required')
        return self

    @property
    def identifier(self):
        return (self.email or self.username or '').lower()


class PasswordChangeInput(RequestModel):
    current_password: Secret
    new_password: Password

    error_messages = {
        'required': 'Current password and new password are required',
        'newPassword': 'New password must be at least 6 characters',
        'currentPassword': 'Current password and new password are required',
    }


class ProfileUpdate(RequestModel):
    first_name: Name = None
    last_name: Name = None
    username: Username = None

    error_messages = {
        'firstName': 'firstName cannot be empty',
        ('firstName', 'string_too_long'): 'firstName must be at most 100 characters',
        ('lastName', 'string_too_long'): 'lastName must be at most 100 characters',
        'lastName': 'lastName cannot be empty',
        'username': 'Username must be between 3 and 80 characters',
    }


def parse_profile_update(payload):
    """Only keys present in the body are returned."""
    return ProfileUpdate.parse(payload).model_dump(exclude_unset=True)


class RecipeUpdate(RequestModel):
    """Partial recipe body; a key that is sent must hold a valid value."""
    title: Title = None
    description: Optional[Text] = None
    image_url: Optional[Url] = None
    prep_time: Optional[Minutes] = None
    cook_time: Optional[Minutes] = None
    servings: Optional[Servings] = None
    difficulty: Difficulty = None
    is_public: StrictBool = None
    ingredients: Steps = None
    instructions: Steps = None

    error_messages = {
        'title': 'Recipe title is required',
        ('title', 'string_too_long'): 'Recipe title must be at most 200 characters',
        'ingredients': 'At least one ingredient is required',
        'instructions': 'At least one instruction is required',
        'difficulty': 'Invalid difficulty level',
        'prepTime': 'Prep time must be a non-negative number',
        'cookTime': 'Cook time must be a non-negative number',
        'servings': 'Servings must be a positive number',
        'isPublic': 'isPublic must be a boolean',
        'description': 'Description must be a string',
        'imageUrl': 'imageUrl must be a string of at most 500 characters',
        **_too_large(prepTime='Prep time', cookTime='Cook time', servings='Servings'),
    }

    @field_validator('difficulty', mode='before')
    @classmethod
    def upper_difficulty(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator('prep_time', 'cook_time', 'servings', mode='before')
    @classmethod
    def whole_numbers(cls, value):
        if isinstance(value, bool):
            raise PydanticCustomError('int_type', 'Input should be a valid integer')
        return _blank_to_none(value)

    @field_validator('description', 'image_url', mode='after')
    @classmethod
    def empty_text(cls, value):
        return value or None


class RecipeInput(RecipeUpdate):
    title: Title
    ingredients: Steps
    instructions: Steps
    difficulty: Difficulty = Difficulty.EASY
    is_public: StrictBool = True

    @field_validator('difficulty', 'is_public', mode='before')
    @classmethod
    def null_is_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


def parse_recipe(payload, partial=False):
    """Validate a recipe body and map it onto ``Recipe`` column names.

    With ``partial`` only the keys present in ``payload`` are returned;
    otherwise required fields must be present and defaults apply. Create and
    update share the same field rules.
    """
    if partial:
        return RecipeUpdate.parse(payload).model_dump(exclude_unset=True)
    return RecipeInput.parse(payload).model_dump()


class CookInput(RequestModel):
    rating: Optional[Rating] = None
    notes: Optional[Text] = None

    error_messages = {
        'rating': 'Rating must be an integer between 1 and 5',
        'notes': 'Notes must be a string',
    }

    @field_validator('rating', mode='before')
    @classmethod
    def strict_rating(cls, value):
        if isinstance(value, bool):
            raise PydanticCustomError('int_type', 'Input should be a valid integer')
        return _blank_to_none(value)

    @field_validator('notes', mode='after')
    @classmethod
    def empty_notes(cls, value):
        return value or None
