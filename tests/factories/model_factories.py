"""
Randomized model factories returning API-shaped dicts.

Every factory call generates randomized non-identity fields
(names, notes, coordinates, string suffixes) so tests cannot
rely on specific default values.
"""

import random
import string
import uuid


def _random_suffix(length: int = 6) -> str:
    """Generate random alphanumeric suffix."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def make_user_id() -> str:
    return str(uuid.uuid4())


def make_checkin(user_id: str = None, status: str = "OK", **overrides):
    """
    Build CheckInRecord data with randomized non-identity fields.

    Args:
        user_id: Optional fixed user id (generates random if None)
        status: Safety status value ("OK" or "NeedsAssistance")
        **overrides: Any field override (snake_case or camelCase)

    Returns:
        Dict suitable for CheckInRecord(**data)
    """
    name = f"User {_random_suffix()}"
    data = {
        "user_id": user_id or make_user_id(),
        "user_display_name": name,
        "user_email": f"{name.split()[1]}@contoso.example",
        "department": random.choice(["Operations", "Finance", "Field Services"]),
        "latitude": round(random.uniform(-60, 60), 5),
        "longitude": round(random.uniform(-170, 170), 5),
        "location_precision": random.choice(["CityWide", "Precise"]),
        "status": status,
        "notes": f"note {_random_suffix()}",
    }
    data.update(overrides)
    return data


def make_campaign(targets=None, **overrides):
    """Build HeadcountCampaign data targeting `targets` (three random users if None)."""
    data = {
        "title": f"Headcount {_random_suffix()}",
        "description": f"Drill {_random_suffix(10)}",
        "targeted_user_ids": list(targets) if targets is not None else [make_user_id() for _ in range(3)],
    }
    data.update(overrides)
    return data


def make_preferences(user_id: str = None, **overrides):
    """Build UserPreferences data with randomized flags."""
    data = {
        "user_id": user_id or make_user_id(),
        "default_location_precision": random.choice(["CityWide", "Precise"]),
        "enable_location_services": random.choice([True, False]),
        "enable_teams_notifications": random.choice([True, False]),
    }
    data.update(overrides)
    return data
