from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

MIN_PASSWORD_LENGTH = 6


def ensure_filled(value):
    """Reject missing or whitespace-only form fields."""
    if value is None or not str(value).strip():
        raise ValueError('Please fill in all fields')
    return str(value).strip()


# Durable session record stored under the "userData" key
class UserSession(BaseModel):
    id: str = ""
    name: str = ""
    email: str = ""
    token: str = ""

    @field_validator('id', 'name', 'email', 'token', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return "" if v is None else str(v)

    @property
    def is_complete(self) -> bool:
        """A session counts only when both identifier and email are present"""
        return bool(self.id.strip() and self.email.strip())


# Schema for user login
class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email', mode='before')
    @classmethod
    def validate_email_filled(cls, v):
        return ensure_filled(v)

    @field_validator('password', mode='before')
    @classmethod
    def validate_password_filled(cls, v):
        ensure_filled(v)
        return v


# Schema for user registration
class UserRegister(BaseModel):
    display_name: str = Field(..., serialization_alias="displayName")
    email: EmailStr
    password: str
    confirm_password: str = Field(..., exclude=True)

    @field_validator('display_name', 'email', mode='before')
    @classmethod
    def validate_filled(cls, v):
        return ensure_filled(v)

    @field_validator('password', 'confirm_password', mode='before')
    @classmethod
    def validate_password_filled(cls, v):
        ensure_filled(v)
        return v

    @model_validator(mode='after')
    def check_passwords(self):
        if self.password != self.confirm_password:
            raise ValueError('Passwords do not match')
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        return self


# Schema for GET /users/{id}
class UserProfile(BaseModel):
    id: str
    display_name: str = Field("", alias="displayName")
    email: str = ""

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return str(v)
