"""
Cleaner directory

Create / update / deactivate housekeeper profiles. Profile validation is
field by field so the manager UI can show every problem at once.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from housekeeping.errors import NotFound, PreconditionFailed, ValidationFailed
from housekeeping.models.domain import Cleaner

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\d+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NIC_OLD_PATTERN = re.compile(r"^[0-9]{9}[VXvx]$")
NIC_NEW_PATTERN = re.compile(r"^[0-9]{12}$")
MIN_ADDRESS_LENGTH = 5


def _text(profile: Mapping[str, Any], key: str) -> str:
    value = profile.get(key)
    return str(value).strip() if value is not None else ""


def validate_profile(profile: Mapping[str, Any]) -> Dict[str, str]:
    """Return {field: message} for every invalid field; empty dict means valid."""
    errors: Dict[str, str] = {}

    if not _text(profile, "name"):
        errors["name"] = "Name is required"

    phone = _text(profile, "phone")
    if not phone:
        errors["phone"] = "Phone number is required"
    elif not PHONE_PATTERN.match(phone):
        errors["phone"] = "Phone number must contain digits only"

    email = _text(profile, "email")
    if email and not EMAIL_PATTERN.match(email):
        errors["email"] = "Invalid email address"

    nic = _text(profile, "nic")
    if not nic:
        errors["nic"] = "NIC is required"
    elif not (NIC_OLD_PATTERN.match(nic) or NIC_NEW_PATTERN.match(nic)):
        errors["nic"] = "NIC must be 9 digits followed by V/X, or 12 digits"

    address = _text(profile, "address")
    if not address:
        errors["address"] = "Address is required"
    elif len(address) < MIN_ADDRESS_LENGTH:
        errors["address"] = f"Address must be at least {MIN_ADDRESS_LENGTH} characters"

    return errors


class CleanerDirectory:
    """Housekeeper profiles keyed by id (hk-N)."""

    def __init__(self):
        self._cleaners: Dict[str, Cleaner] = {}

    def _next_id(self) -> str:
        highest = 0
        for cleaner_id in self._cleaners:
            suffix = cleaner_id.rsplit("-", 1)[-1]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"hk-{highest + 1}"

    def _check_unique_name(self, name: str, exclude_id: Optional[str], errors: Dict[str, str]) -> None:
        lowered = name.lower()
        for cleaner in self._cleaners.values():
            if cleaner.id != exclude_id and cleaner.active and cleaner.name.lower() == lowered:
                errors["name"] = f"An active cleaner named {cleaner.name} already exists"
                return

    def create(self, profile: Mapping[str, Any]) -> Cleaner:
        """
        Create a cleaner from a profile mapping.

        Raises:
            ValidationFailed: field-level errors, including duplicate active name
        """
        errors = validate_profile(profile)
        active = bool(profile.get("active", True))
        name = _text(profile, "name")
        if name and active:
            self._check_unique_name(name, None, errors)
        if errors:
            raise ValidationFailed(errors)

        cleaner = Cleaner(
            id=self._next_id(),
            name=name,
            phone=_text(profile, "phone"),
            email=_text(profile, "email"),
            nic=_text(profile, "nic"),
            address=_text(profile, "address"),
            active=active,
        )
        self._cleaners[cleaner.id] = cleaner
        logger.info(f"Cleaner {cleaner.id} ({cleaner.name}) created")
        return cleaner

    def update(self, cleaner_id: str, profile: Mapping[str, Any]) -> Cleaner:
        """
        Replace a cleaner's profile. Setting active=False here does not touch
        room assignments; use deactivate for that.
        """
        cleaner = self.get(cleaner_id)
        errors = validate_profile(profile)
        active = bool(profile.get("active", cleaner.active))
        name = _text(profile, "name")
        if name and active:
            self._check_unique_name(name, cleaner_id, errors)
        if errors:
            raise ValidationFailed(errors)

        cleaner.name = name
        cleaner.phone = _text(profile, "phone")
        cleaner.email = _text(profile, "email")
        cleaner.nic = _text(profile, "nic")
        cleaner.address = _text(profile, "address")
        cleaner.active = active
        logger.info(f"Cleaner {cleaner.id} updated")
        return cleaner

    def deactivate(self, cleaner_id: str) -> Cleaner:
        cleaner = self.get(cleaner_id)
        cleaner.active = False
        return cleaner

    def put(self, cleaner: Cleaner) -> None:
        self._cleaners[cleaner.id] = cleaner

    def clear(self) -> None:
        self._cleaners.clear()

    def find(self, cleaner_id: Optional[str]) -> Optional[Cleaner]:
        if cleaner_id is None:
            return None
        return self._cleaners.get(cleaner_id)

    def get(self, cleaner_id: str) -> Cleaner:
        cleaner = self._cleaners.get(cleaner_id)
        if cleaner is None:
            raise NotFound("Cleaner", cleaner_id)
        return cleaner

    def require_active(self, cleaner_id: str) -> Cleaner:
        cleaner = self.get(cleaner_id)
        if not cleaner.active:
            raise PreconditionFailed(f"Cleaner {cleaner.name} is inactive")
        return cleaner

    def find_by_name(self, name: str) -> Optional[Cleaner]:
        """Case-insensitive lookup, active profiles first."""
        lowered = name.strip().lower()
        matches = [c for c in self._cleaners.values() if c.name.lower() == lowered]
        matches.sort(key=lambda c: not c.active)
        return matches[0] if matches else None

    def list(self, active_only: bool = False) -> List[Cleaner]:
        return [c for c in self._cleaners.values() if c.active or not active_only]

    def display_name(self, cleaner_id: Optional[str]) -> Optional[str]:
        cleaner = self.find(cleaner_id)
        return cleaner.name if cleaner else None
