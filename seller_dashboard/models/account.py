"""
Account Models
Identities and accounts kept in the local session store.

An account always carries a bearer token. Its identity is either
confirmed by the server (a `user` object came back with the token) or
synthesized on the client when the server returned only a token.
Display code must handle both.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Union


# =============================================================================
# Identities
# =============================================================================

@dataclass(frozen=True)
class ConfirmedIdentity:
    """Identity returned by the backend"""
    id: str
    email: str
    shop_name: str

    kind = "confirmed"

    @property
    def is_confirmed(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "id": self.id,
            "email": self.email,
            "shop_name": self.shop_name,
        }


@dataclass(frozen=True)
class SyntheticIdentity:
    """
    Identity fabricated from the login credential.

    The credential doubles as email and display name until the backend
    returns real user data.
    """
    email: str
    generated_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    kind = "synthetic"

    @property
    def id(self) -> str:
        return self.generated_id

    @property
    def shop_name(self) -> str:
        return self.email

    @property
    def is_confirmed(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "generated_id": self.generated_id,
            "email": self.email,
        }


Identity = Union[ConfirmedIdentity, SyntheticIdentity]


def _require_dict(data, what: str) -> dict:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value:
        raise ValueError(f"{key!r} must be a non-empty string")
    return value


def identity_from_dict(data: Optional[dict]) -> Optional[Identity]:
    """Rebuild a stored identity. Raises TypeError/ValueError/KeyError on a malformed one."""
    if data is None:
        return None
    _require_dict(data, "user")
    if data.get("kind") == SyntheticIdentity.kind:
        return SyntheticIdentity(
            email=_require_str(data, "email"),
            generated_id=_require_str(data, "generated_id"),
        )
    email = _require_str(data, "email")
    shop_name = data.get("shop_name")
    return ConfirmedIdentity(
        id=_require_str(data, "id"),
        email=email,
        shop_name=shop_name if isinstance(shop_name, str) and shop_name else email,
    )


def identity_from_login(credential: str, user: Optional[dict]) -> Identity:
    """Build an identity from a login response's optional `user` object"""
    if not isinstance(user, dict):
        return SyntheticIdentity(email=credential)
    email = user.get("email")
    if user.get("id") and isinstance(email, str) and email:
        name = user.get("shop_name") or user.get("name")
        return ConfirmedIdentity(
            id=str(user["id"]),
            email=email,
            shop_name=name if isinstance(name, str) else email,
        )
    return SyntheticIdentity(email=credential)


# =============================================================================
# Account
# =============================================================================

@dataclass
class Account:
    """One logged-in seller identity and its bearer token"""
    id: str
    shop_name: str
    token: str
    user: Optional[Identity] = None

    @classmethod
    def create(cls, token: str, identity: Identity) -> "Account":
        return cls(
            id=str(uuid.uuid4()),
            shop_name=identity.shop_name,
            token=token,
            user=identity,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        _require_dict(data, "account")
        shop_name = data["shop_name"]
        if not isinstance(shop_name, str):
            raise TypeError("'shop_name' must be a string")
        return cls(
            id=_require_str(data, "id"),
            shop_name=shop_name,
            token=_require_str(data, "token"),
            user=identity_from_dict(data.get("user")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_name": self.shop_name,
            "token": self.token,
            "user": self.user.to_dict() if self.user else None,
        }

    @property
    def email(self) -> Optional[str]:
        return self.user.email if self.user else None

    @property
    def display_name(self) -> str:
        if self.user is not None and not self.user.is_confirmed:
            return f"{self.shop_name} (unverified)"
        return self.shop_name

    def __repr__(self) -> str:
        # Keep tokens out of logs and tracebacks
        return f"Account(id={self.id!r}, shop_name={self.shop_name!r})"
